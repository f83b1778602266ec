from __future__ import annotations

from dataclasses import fields

from sayer import group, info

from courier import monkay

help = """
Configuration CLI Module.

**Inspect the settings courier runtimes start with.**

Settings are loaded from `COURIER_SETTINGS_MODULE`, falling back to
`courier.conf.global_settings.Settings`.
"""

config = group(
    name="config",
    help=help,
)


@config.command()
def show() -> None:
    """
    Print every effective setting as `name = value`, one per line.
    """
    current = monkay.settings
    for f in fields(current):
        info(f"{f.name} = {getattr(current, f.name)!r}")

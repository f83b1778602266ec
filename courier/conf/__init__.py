from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from monkay import Monkay

if TYPE_CHECKING:  # pragma: no cover
    from .global_settings import Settings

monkay = Monkay(
    globals(),
    settings_path=lambda: os.environ.get(
        "COURIER_SETTINGS_MODULE", "courier.conf.global_settings.Settings"
    ),
)


class SettingsForward:
    """
    Lazy proxy to the active settings object.

    Attribute reads are resolved against `monkay.settings` every time, so a
    settings override installed after import is still honoured.
    """

    def __getattribute__(self, name: str) -> Any:
        return getattr(monkay.settings, name)


settings: "Settings" = SettingsForward()  # type: ignore[assignment]

__all__ = ["monkay", "settings"]

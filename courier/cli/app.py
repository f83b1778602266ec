from __future__ import annotations

from sayer import Sayer

from courier.cli.config import config
from courier.cli.demo import demo

help = """
courier command line.

Run the bundled actor scenarios and inspect the active configuration.
"""

app = Sayer(name="courier", help=help)
app.add_command(demo)
app.add_command(config)


def run() -> None:
    app()

"""SETT Pro command-line interface package.

Supports ``python -m sett_pro.cli`` as an alternative to the ``sett`` entry point.
"""

from sett_pro.cli.main import cli, main

__all__ = ["cli", "main"]

"""Athena Tool - drive AWS Athena named queries for dashboards and the shell."""

from athena_tool.__about__ import __version__

__all__ = ["__version__"]

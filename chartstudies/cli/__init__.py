"""CLI commands for chartstudies.

This package provides the command-line interface for chartstudies:
calculating studies over CSV candle files, evaluating a single point,
listing studies and creating the config file.
"""

from chartstudies.cli.main import cli, main

__all__ = ["cli", "main"]

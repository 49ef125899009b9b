"""Command line interface for treeconf."""

from treeconf.cli.main import cli

__all__ = ["cli"]

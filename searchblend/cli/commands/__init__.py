"""CLI commands."""

from searchblend.cli.commands.blend import blend_command
from searchblend.cli.commands.layout import layout_command

__all__ = ["blend_command", "layout_command"]

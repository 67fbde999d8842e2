"""Initialization instructions listing the configured toolboxes."""
from __future__ import annotations

from session.settings import WorkbenchConfig

NO_DESCRIPTION = "No description provided"
NO_TOOLBOXES_MESSAGE = (
    "No toolboxes configured. Add toolboxes to the workbench configuration file to expose downstream tools."
)
USAGE_LINE = "Use open_toolbox to connect to a toolbox, then use_tool to invoke its tools."


def build_instructions(config: WorkbenchConfig) -> str:
    """Render the toolbox listing from static configuration only."""

    if not config.toolboxes:
        return NO_TOOLBOXES_MESSAGE

    listings = []
    for name, toolbox in config.toolboxes.items():
        count = len(toolbox.servers)
        noun = "server" if count == 1 else "servers"
        listings.append(f"{name} ({count} {noun})\n  Description: {toolbox.description or NO_DESCRIPTION}")

    return "\n".join(["Available Toolboxes:", "", "\n\n".join(listings), "", USAGE_LINE])


__all__ = ["NO_DESCRIPTION", "NO_TOOLBOXES_MESSAGE", "USAGE_LINE", "build_instructions"]

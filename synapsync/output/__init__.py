# SynapSync Output Module
# Rich console output

from synapsync.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]

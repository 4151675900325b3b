"""trackmv: move files and directories while keeping a tracked-path index in sync."""

__version__ = "0.1.0"

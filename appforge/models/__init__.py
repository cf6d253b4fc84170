"""Data models for Appforge runs."""
from appforge.models.options import Database, Options
from appforge.models.patch import Block, PatchSpec
from appforge.models.run import CommandResult, CommandSpec, Run

__all__ = [
    "Block",
    "CommandResult",
    "CommandSpec",
    "Database",
    "Options",
    "PatchSpec",
    "Run",
]

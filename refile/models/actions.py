"""
Module: actions
Purpose: Defines the data structures for planned refile actions.
"""

from dataclasses import dataclass, field

@dataclass(frozen=True)
class FileAction:
    """Base class for all planned actions."""
    type: str

@dataclass(frozen=True)
class CreateFolderAction(FileAction):
    """Action to create a base or bucket folder."""
    path: str
    type: str = field(default="CREATE_FOLDER", init=False)

@dataclass(frozen=True)
class MoveAction(FileAction):
    """Action to move a file or directory into its bucket."""
    src: str
    dst: str
    renamed: bool = False
    type: str = field(default="MOVE", init=False)

@dataclass(frozen=True)
class SkipAction(FileAction):
    """Action recording an item left in place and why."""
    path: str
    reason: str
    type: str = field(default="SKIP", init=False)

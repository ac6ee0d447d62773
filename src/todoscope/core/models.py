#!/usr/bin/env python3
"""
TODOSCOPE CORE MODELS
---------------------
Defines the fundamental data structures used across the TodoScope engine.
Every record is built fresh for one line (or one file) and never mutated.

Author: TodoScope Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union


class DelimiterKind(Enum):
    """
    The closed set of bracket kinds a todo marker may carry.
    Iteration order is fixed and drives both validation and extraction.
    """
    PARENTHESES = ("(", ")", "parentheses")
    BRACES = ("{", "}", "braces")
    BRACKETS = ("[", "]", "brackets")
    ANGLES = ("<", ">", "angles")

    def __init__(self, open_char: str, close_char: str, display_name: str):
        self.open_char = open_char
        self.close_char = close_char
        self.display_name = display_name

    def to_tuple(self) -> Tuple[str, str]:
        """For quick destructuring."""
        return self.open_char, self.close_char


@dataclass(frozen=True)
class DelimitedField:
    """One bracket group pulled out of the metadata span, e.g. `(ticket123)`."""
    kind: DelimiterKind
    content: str            # Text strictly between the open and close chars


@dataclass(frozen=True)
class BlameInfo:
    """Provenance of a single line as reported by `git blame`."""
    email: str
    timestamp: datetime     # Commit author time, UTC


@dataclass(frozen=True)
class ValidTodo:
    """A well-formed marker: free text plus zero to four delimited fields."""
    line: int                                   # 1-based line number
    comment: str                                # Free text after the colon
    delimiters: Tuple[DelimitedField, ...] = ()
    blame: Optional[BlameInfo] = None


@dataclass(frozen=True)
class InvalidTodo:
    """A marker whose metadata failed validation, kept exactly as written."""
    line: int
    full_text: str
    blame: Optional[BlameInfo] = None


# `None` stands for a line that carries no marker at all.
TodoResult = Union[ValidTodo, InvalidTodo]


@dataclass(frozen=True)
class FileMetadata:
    filepath: Path
    last_modified: datetime


@dataclass(frozen=True)
class FileAnalysis:
    """
    Everything found in one file, in order of appearance.
    """
    metadata: FileMetadata
    valids: List[ValidTodo] = field(default_factory=list)
    invalids: List[InvalidTodo] = field(default_factory=list)


@dataclass(frozen=True)
class DirectoryAnalysis:
    """
    The result of a directory scan. Only files that could be read are
    counted in `total_files_scanned`.
    """
    total_files_scanned: int
    last_scan_on: datetime
    file_analyses: List[FileAnalysis] = field(default_factory=list)


AnalysisResult = Union[FileAnalysis, DirectoryAnalysis]

#!/usr/bin/env python3
"""
TODOSCOPE LINE ANALYZER - The Classifier
----------------------------------------
Runs the Recognizer and the Validator over one line and produces a
ValidTodo, an InvalidTodo, or nothing at all.

Author: TodoScope Team
Date: 2026-10-18
"""

from typing import Optional, Protocol

from todoscope.analysis.recognizer import DEFAULT_MARKER, MarkerRecognizer
from todoscope.analysis.validator import MetadataValidator
from todoscope.core.models import BlameInfo, InvalidTodo, TodoResult, ValidTodo


class BlameLookup(Protocol):
    """Anything that can attribute a 0-based line index to an author."""

    def lookup(self, line_index: int) -> Optional[BlameInfo]:
        ...


class LineAnalyzer:
    """
    Stateless line classifier. One instance can be shared by every file
    and every worker thread.
    """

    def __init__(self, marker: str = DEFAULT_MARKER):
        self.recognizer = MarkerRecognizer(marker)
        self.validator = MetadataValidator()

    def process(self, line: str, line_index: int,
                blame: Optional[BlameLookup] = None) -> Optional[TodoResult]:
        """
        Classifies a single line. `line_index` is 0-based; the record
        carries the 1-based number shown to humans.
        """
        match = self.recognizer.recognize(line)
        if match is None:
            return None

        blame_info = blame.lookup(line_index) if blame is not None else None

        if not self.validator.validate(match.marker_content):
            return InvalidTodo(
                line=line_index + 1,
                full_text=match.full_text,
                blame=blame_info,
            )

        return ValidTodo(
            line=line_index + 1,
            comment=match.comment_content,
            delimiters=self.validator.extract(match.marker_content),
            blame=blame_info,
        )

#!/usr/bin/env python3
"""
TODOSCOPE RECOGNIZER - The Spotter
----------------------------------
Finds `// todo ... : ...` comments in raw source lines and splits them
into the metadata span (between the keyword and the first colon) and
the free text (everything after that colon).

Author: TodoScope Team
Date: 2026-10-18
"""

import re
from dataclasses import dataclass
from typing import Optional

COMMENT_OPENER = "//"
DEFAULT_MARKER = "todo"


@dataclass(frozen=True)
class MarkerMatch:
    full_text: str          # Opener through end of line, as written
    marker_content: str     # Metadata span, e.g. "(ticket123)"
    comment_content: str    # Free text, possibly empty


class MarkerRecognizer:
    """
    Matches the todo comment convention. The keyword is case-sensitive,
    so `// TODO: x` is not a marker.
    """

    def __init__(self, marker: str = DEFAULT_MARKER):
        self.marker = marker
        # Group 1: metadata span (lazy, stops at the first colon)
        # Group 2: free text
        try:
            self.pattern = re.compile(
                re.escape(COMMENT_OPENER)
                + r"\s*"
                + re.escape(marker)
                + r"\s*(?P<marker_content>.*?)\s*:\s*(?P<comment_content>.*)$"
            )
        except re.error as e:
            raise RuntimeError(f"Failed to compile marker pattern for '{marker}': {e}")

    def recognize(self, line: str) -> Optional[MarkerMatch]:
        match = self.pattern.search(line)
        if match is None:
            return None

        return MarkerMatch(
            full_text=match.group(0),
            marker_content=match.group("marker_content"),
            comment_content=match.group("comment_content"),
        )

#!/usr/bin/env python3
"""
TODOSCOPE VALIDATOR - The Judge
-------------------------------
Decides whether the metadata span of a todo marker is well-formed and,
in a separate pass, pulls the bracketed fields out of it.

Grammar of the metadata span:
- At most one group per bracket kind: (), {}, [], <>.
- Groups may appear in any order, any subset may be absent.
- Group content is one or more of [A-Za-z0-9_-].
- Text outside the groups is free filler but may not hold stray
  bracket characters.

Author: TodoScope Team
Date: 2026-10-18
"""

import re
from typing import Dict, Tuple

from todoscope.core.models import DelimitedField, DelimiterKind

CONTENT_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


class MetadataValidator:
    """
    Pure predicate (`validate`) plus pure projection (`extract`).
    Patterns are compiled once; instances are read-only after __init__.
    """

    def __init__(self):
        self.group_patterns: Dict[DelimiterKind, re.Pattern] = {}
        self.extract_patterns: Dict[DelimiterKind, re.Pattern] = {}

        for kind in DelimiterKind:
            open_char, close_char = (re.escape(c) for c in kind.to_tuple())
            filler = f"[^{open_char}{close_char}]*?"
            try:
                self.group_patterns[kind] = re.compile(
                    f"{filler}{open_char}(?P<content>[^{open_char}{close_char}]*?){close_char}{filler}"
                )
                self.extract_patterns[kind] = re.compile(
                    f"{open_char}(?P<content>.*?){close_char}"
                )
            except re.error as e:
                raise RuntimeError(f"Failed to compile {kind.display_name} pattern: {e}")

    def validate(self, marker_content: str) -> bool:
        """
        Returns False on the first bracket kind that is duplicated,
        unbalanced, nested in itself, empty, or holds a character
        outside the content class.
        """
        for kind in DelimiterKind:
            match = self.group_patterns[kind].fullmatch(marker_content)

            if match is None:
                if kind.open_char in marker_content or kind.close_char in marker_content:
                    return False
                continue

            if not CONTENT_PATTERN.fullmatch(match.group("content")):
                return False

        return True

    def extract(self, marker_content: str) -> Tuple[DelimitedField, ...]:
        """
        First occurrence of each kind, in kind order (not text order).
        Only meaningful on spans that passed `validate`.
        """
        fields = []
        for kind in DelimiterKind:
            match = self.extract_patterns[kind].search(marker_content)
            if match:
                fields.append(DelimitedField(kind=kind, content=match.group("content")))
        return tuple(fields)

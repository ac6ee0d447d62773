#!/usr/bin/env python3
"""
TODOSCOPE RECOGNIZER SUITE
--------------------------
Which lines carry the marker, and how they are split into metadata
and free text.
"""

import pytest

from todoscope.analysis.recognizer import MarkerRecognizer


@pytest.fixture
def recognizer():
    return MarkerRecognizer()


def test_lowercase_marker_matches(recognizer):
    match = recognizer.recognize("// todo: x")
    assert match is not None
    assert match.marker_content == ""
    assert match.comment_content == "x"
    assert match.full_text == "// todo: x"


@pytest.mark.parametrize("line", [
    "// TODO: x",
    "// Todo: x",
    "// todo this has no colon",
    "/ todo: x",
    "todo: x",
    "# todo: x",
    "",
])
def test_non_markers(recognizer, line):
    assert recognizer.recognize(line) is None


@pytest.mark.parametrize("line", [
    "// todo: valid",
    "//todo      : valid",
    "//         todo      : valid",
    "let x = 1; // todo : valid",
])
def test_whitespace_tolerance(recognizer, line):
    match = recognizer.recognize(line)
    assert match is not None
    assert match.marker_content == ""
    assert match.comment_content == "valid"


def test_metadata_stops_at_first_colon(recognizer):
    match = recognizer.recognize("// todo(fix-me): call http://example.com: soon")
    assert match.marker_content == "(fix-me)"
    assert match.comment_content == "call http://example.com: soon"


def test_metadata_whitespace_is_trimmed(recognizer):
    match = recognizer.recognize("// todo   (abc) {def}   :   message")
    assert match.marker_content == "(abc) {def}"
    assert match.comment_content == "message"


def test_empty_free_text_still_matches(recognizer):
    match = recognizer.recognize("// todo(abc):")
    assert match is not None
    assert match.comment_content == ""


def test_full_text_starts_at_comment_opener(recognizer):
    match = recognizer.recognize("    call(); // todo(a)(b): twice")
    assert match.full_text == "// todo(a)(b): twice"

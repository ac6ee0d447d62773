#!/usr/bin/env python3
"""
TODOSCOPE BLAME SUITE
---------------------
Porcelain parsing on canned output, plus a real repository round trip
when a git binary is available.
"""

import shutil
import subprocess
from datetime import datetime, timezone

import pytest

from todoscope.config.settings import AnalysisConfig
from todoscope.core.engine import AnalysisEngine
from todoscope.provenance.blame import (
    UNKNOWN_EMAIL,
    FileBlameContext,
    GitBlameProvider,
    parse_porcelain,
)

SHA_A = "a" * 40
SHA_B = "b" * 40
SHA_ZERO = "0" * 40

PORCELAIN = "\n".join([
    f"{SHA_A} 1 1 2",
    "author Alice",
    "author-mail <alice@example.com>",
    "author-time 1700000000",
    "author-tz +0000",
    "summary first",
    "filename main.rs",
    "\t// todo: one",
    f"{SHA_A} 2 2",
    "\t// todo: two",
    f"{SHA_B} 3 3 1",
    "author Bob",
    "author-mail <not an email>",
    "author-time 1710000000",
    "filename main.rs",
    "\t// todo: three",
    f"{SHA_A} 4 4 1",
    "\t// todo: four",
    f"{SHA_ZERO} 5 5 1",
    "author Not Committed Yet",
    "author-mail <not.committed.yet>",
    "author-time 1720000000",
    "filename main.rs",
    "\t// todo: five",
])


def test_parse_porcelain_reuses_commit_headers():
    blame = parse_porcelain(PORCELAIN)

    assert set(blame) == {1, 2, 3, 4}
    assert blame[1].email == "alice@example.com"
    assert blame[2] == blame[1]
    assert blame[4] == blame[1]
    assert blame[1].timestamp == datetime.fromtimestamp(1700000000, tz=timezone.utc)


def test_parse_porcelain_falls_back_to_unknown_email():
    assert parse_porcelain(PORCELAIN)[3].email == UNKNOWN_EMAIL


def test_parse_porcelain_skips_uncommitted_lines():
    assert 5 not in parse_porcelain(PORCELAIN)


def test_parse_porcelain_empty_output():
    assert parse_porcelain("") == {}


def test_file_context_lookup_is_zero_based(tmp_path):
    context = FileBlameContext(tmp_path / "main.rs", parse_porcelain(PORCELAIN))
    assert context.lookup(0).email == "alice@example.com"
    assert context.lookup(4) is None
    assert context.lookup(100) is None


def test_discover_outside_repository(tmp_path, monkeypatch):
    def fake_run(*args, **kwargs):
        return subprocess.CompletedProcess(args[0], 128, stdout="", stderr="fatal: not a git repository")

    monkeypatch.setattr(subprocess, "run", fake_run)
    assert GitBlameProvider.discover(tmp_path) is None


def test_discover_without_git_binary(tmp_path, monkeypatch):
    def missing_git(*args, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr(subprocess, "run", missing_git)
    assert GitBlameProvider.discover(tmp_path) is None
    assert GitBlameProvider(tmp_path).file_context(tmp_path / "x.rs") is None


def _git(cwd, *args):
    subprocess.run(["git", *args], cwd=str(cwd), check=True, capture_output=True, text=True)


@pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")
def test_engine_attaches_blame_from_real_repository(tmp_path):
    _git(tmp_path, "init", "-q")
    _git(tmp_path, "config", "user.email", "dev@example.com")
    _git(tmp_path, "config", "user.name", "Dev")
    _git(tmp_path, "config", "commit.gpgsign", "false")

    tracked = tmp_path / "lib.rs"
    tracked.write_text("fn a() {}\n// todo(abc): tracked\n", encoding="utf-8")
    _git(tmp_path, "add", "lib.rs")
    _git(tmp_path, "commit", "-q", "-m", "initial")

    untracked = tmp_path / "new.rs"
    untracked.write_text("// todo: untracked\n", encoding="utf-8")

    engine = AnalysisEngine.for_path(tmp_path, AnalysisConfig())
    assert engine.blame_provider is not None

    result = engine.analyze_dir(tmp_path)
    by_name = {a.metadata.filepath.name: a for a in result.file_analyses}

    tracked_todo = by_name["lib.rs"].valids[0]
    assert tracked_todo.line == 2
    assert tracked_todo.blame is not None
    assert tracked_todo.blame.email == "dev@example.com"
    assert tracked_todo.blame.timestamp.tzinfo is not None

    assert by_name["new.rs"].valids[0].blame is None


def test_parse_porcelain_accepts_sha256_object_names():
    sha256 = "c" * 64
    output = "\n".join([
        f"{sha256} 1 1 1",
        "author-mail <carol@example.com>",
        "author-time 1700000000",
        "\t// todo: one",
        f"{'0' * 64} 2 2 1",
        "author-mail <not.committed.yet>",
        "author-time 1720000000",
        "\t// todo: two",
    ])

    blame = parse_porcelain(output)

    assert set(blame) == {1}
    assert blame[1].email == "carol@example.com"


def test_parse_porcelain_ignores_hash_lookalikes_in_non_hex_text():
    output = f"{'g' * 40} 1 1 1\nauthor-time 1700000000\n"
    assert parse_porcelain(output) == {}


def test_file_context_keeps_bare_carriage_returns(tmp_path, monkeypatch):
    porcelain = "\n".join([
        f"{SHA_A} 1 1 2",
        "author-mail <alice@example.com>",
        "author-time 1700000000",
        "\tlet s = 1;\r// todo(x): bare cr",
        f"{SHA_A} 2 2",
        "\t// todo: two",
        "",
    ]).encode("utf-8")

    def fake_run(*args, **kwargs):
        return subprocess.CompletedProcess(args[0], 0, stdout=porcelain, stderr=b"")

    monkeypatch.setattr(subprocess, "run", fake_run)
    context = GitBlameProvider(tmp_path).file_context(tmp_path / "main.rs")

    assert context.lookup(0).email == "alice@example.com"
    assert context.lookup(1).email == "alice@example.com"
    assert context.lookup(2) is None


@pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")
def test_line_numbers_agree_with_git_on_bare_carriage_return(tmp_path):
    _git(tmp_path, "init", "-q")
    _git(tmp_path, "config", "user.email", "dev@example.com")
    _git(tmp_path, "config", "user.name", "Dev")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    _git(tmp_path, "config", "core.autocrlf", "false")

    tracked = tmp_path / "lib.rs"
    tracked.write_bytes(b"let s = 1;\r// todo(x): bare cr\nnext\n// todo: three\n")
    _git(tmp_path, "add", "lib.rs")
    _git(tmp_path, "commit", "-q", "-m", "initial")

    engine = AnalysisEngine.for_path(tmp_path, AnalysisConfig())
    analysis = engine.analyze_file(tracked)

    assert [t.line for t in analysis.valids] == [1, 3]
    assert all(t.blame is not None for t in analysis.valids)

#!/usr/bin/env python3
"""
TODOSCOPE BLAME - The Historian
-------------------------------
Attributes lines to their last author through `git blame --porcelain`.
Every failure mode (no git binary, no repository, untracked file,
uncommitted line) degrades to "no provenance" instead of an error.

Author: TodoScope Team
Date: 2026-10-18
"""

import logging
import subprocess
from datetime import datetime, timezone
from email.utils import parseaddr
from pathlib import Path
from typing import Dict, Optional, Tuple

from todoscope.core.models import BlameInfo

logger = logging.getLogger("todoscope.blame")

UNKNOWN_EMAIL = "unknown@example.com"
# SHA-1 and SHA-256 object names
HASH_LENGTHS = (40, 64)
HEX_DIGITS = frozenset("0123456789abcdef")
GIT_TIMEOUT_SECONDS = 30


def _is_object_name(token: str) -> bool:
    return len(token) in HASH_LENGTHS and set(token) <= HEX_DIGITS


def _is_uncommitted(commit_hash: str) -> bool:
    return set(commit_hash) == {"0"}


def _normalize_email(raw: str) -> str:
    _, address = parseaddr(raw.strip())
    if "@" not in address or address.startswith("@") or address.endswith("@"):
        return UNKNOWN_EMAIL
    return address


def parse_porcelain(output: str) -> Dict[int, BlameInfo]:
    """
    Maps 1-based final line numbers to BlameInfo.

    Porcelain prints the author block only the first time a commit shows
    up, so commit details are cached by hash and resolved at the end.
    """
    commit_info: Dict[str, Tuple[str, Optional[int]]] = {}
    line_commit: Dict[int, str] = {}
    current_hash = None

    # Split on "\n" only: source lines may carry a lone "\r"
    for pline in output.split("\n"):
        if pline.startswith("\t"):
            continue  # source content

        parts = pline.split()
        if len(parts) >= 3 and _is_object_name(parts[0]) and parts[2].isdigit():
            # Header: <hash> <orig-line> <final-line> [<group-size>]
            current_hash = parts[0]
            line_commit[int(parts[2])] = current_hash
            commit_info.setdefault(current_hash, (UNKNOWN_EMAIL, None))
        elif current_hash is None:
            continue
        elif pline.startswith("author-mail "):
            _, epoch = commit_info[current_hash]
            commit_info[current_hash] = (_normalize_email(pline[len("author-mail "):]), epoch)
        elif pline.startswith("author-time "):
            email, _ = commit_info[current_hash]
            try:
                commit_info[current_hash] = (email, int(pline[len("author-time "):]))
            except ValueError:
                logger.debug(f"Unparsable author-time for {current_hash}: {pline!r}")

    blame_map = {}
    for line_no, commit_hash in line_commit.items():
        if _is_uncommitted(commit_hash):
            continue
        email, epoch = commit_info[commit_hash]
        if epoch is None:
            continue
        blame_map[line_no] = BlameInfo(
            email=email,
            timestamp=datetime.fromtimestamp(epoch, tz=timezone.utc),
        )
    return blame_map


class FileBlameContext:
    """Blame of one file, computed once and looked up per line."""

    def __init__(self, filepath: Path, blame_map: Dict[int, BlameInfo]):
        self.filepath = filepath
        self._blame_map = blame_map

    def lookup(self, line_index: int) -> Optional[BlameInfo]:
        """`line_index` is 0-based, git numbers lines from 1."""
        return self._blame_map.get(line_index + 1)


class GitBlameProvider:
    """
    Entry point for provenance. Holds only the repository root, so it can
    be shared across worker threads.
    """

    def __init__(self, repo_root: Path):
        self.repo_root = Path(repo_root)

    @classmethod
    def discover(cls, path: Path) -> Optional["GitBlameProvider"]:
        """Finds the work tree containing `path`, or None."""
        path = Path(path).resolve()
        cwd = path if path.is_dir() else path.parent
        try:
            proc = subprocess.run(
                ["git", "rev-parse", "--show-toplevel"],
                capture_output=True, text=True, cwd=str(cwd),
                timeout=GIT_TIMEOUT_SECONDS, check=False,
            )
        except (FileNotFoundError, OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"git unavailable for {path}: {e}")
            return None

        if proc.returncode != 0 or not proc.stdout.strip():
            logger.debug(f"No git repository found for {path}")
            return None
        return cls(Path(proc.stdout.strip()))

    def file_context(self, filepath: Path) -> Optional[FileBlameContext]:
        filepath = Path(filepath).resolve()
        try:
            proc = subprocess.run(
                ["git", "blame", "--porcelain", "--", filepath.name],
                capture_output=True, cwd=str(filepath.parent),
                timeout=GIT_TIMEOUT_SECONDS, check=False,
            )
        except (FileNotFoundError, OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"git blame failed for {filepath}: {e}")
            return None

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            logger.debug(f"No blame for {filepath}: {stderr}")
            return None
        # Bytes in, so a lone "\r" in the source is not read as a newline
        return FileBlameContext(filepath, parse_porcelain(proc.stdout.decode("utf-8", errors="replace")))

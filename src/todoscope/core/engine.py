#!/usr/bin/env python3
"""
TODOSCOPE ENGINE - The Orchestrator
-----------------------------------
Walks files and directories, feeds every line through the LineAnalyzer
and collects the results into FileAnalysis / DirectoryAnalysis records.

Failure semantics:
- analyze_file is strict: read errors propagate to the caller.
- analyze_dir is best-effort: unreadable files are logged and left out.

Author: TodoScope Team
Date: 2026-10-18
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Protocol

from todoscope.analysis.line_analyzer import BlameLookup, LineAnalyzer
from todoscope.config.settings import AnalysisConfig
from todoscope.core.models import (
    AnalysisResult,
    DirectoryAnalysis,
    FileAnalysis,
    FileMetadata,
    InvalidTodo,
    ValidTodo,
)
from todoscope.provenance.blame import GitBlameProvider

logger = logging.getLogger("todoscope.engine")


class BlameProvider(Protocol):
    def file_context(self, filepath: Path) -> Optional[BlameLookup]:
        ...


def read_lines(filepath: Path) -> Iterator[str]:
    """
    Yields lines without their terminator. Strict UTF-8.

    Lines end at "\\n" only, as git numbers them; a lone "\\r" stays part
    of the line.
    """
    with open(filepath, "rb") as f:
        for raw in f:
            line = raw.decode("utf-8", errors="strict")
            if line.endswith("\n"):
                line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
            yield line


class AnalysisEngine:
    """
    Principal orchestrator for todo scans. Holds a shared, read-only
    LineAnalyzer and an optional blame provider.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None,
                 blame_provider: Optional[BlameProvider] = None,
                 analyzer: Optional[LineAnalyzer] = None):
        self.config = config or AnalysisConfig()
        self.blame_provider = blame_provider
        self.analyzer = analyzer or LineAnalyzer()

    @classmethod
    def for_path(cls, path: Path, config: Optional[AnalysisConfig] = None) -> "AnalysisEngine":
        """Builds an engine, wiring git provenance when the config asks for it."""
        config = config or AnalysisConfig()
        provider = None
        if config.blame:
            provider = GitBlameProvider.discover(Path(path))
            if provider is None:
                logger.info(f"Provenance disabled: {path} is not inside a git work tree")
        return cls(config=config, blame_provider=provider)

    def analyze_path(self, path: Path,
                     progress_callback: Optional[Callable[[int, int], None]] = None) -> AnalysisResult:
        """Entry point: dispatches on file vs directory."""
        path = Path(path)
        if path.is_dir():
            return self.analyze_dir(path, progress_callback=progress_callback)
        if path.is_file():
            return self.analyze_file(path)
        raise FileNotFoundError(f"Path is neither a file nor a directory: {path}")

    def analyze_file(self, filepath: Path) -> FileAnalysis:
        """
        Classifies every line of one file. Raises OSError or
        UnicodeDecodeError when the file cannot be read.
        """
        filepath = Path(filepath)
        stat = filepath.stat()

        blame = None
        if self.blame_provider is not None:
            blame = self.blame_provider.file_context(filepath)

        valids: List[ValidTodo] = []
        invalids: List[InvalidTodo] = []

        for line_index, line in enumerate(read_lines(filepath)):
            result = self.analyzer.process(line, line_index, blame)
            if isinstance(result, ValidTodo):
                valids.append(result)
            elif isinstance(result, InvalidTodo):
                invalids.append(result)

        logger.debug(f"{filepath}: {len(valids)} valid, {len(invalids)} invalid")
        return FileAnalysis(
            metadata=FileMetadata(
                filepath=filepath,
                last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            ),
            valids=valids,
            invalids=invalids,
        )

    def discover_files(self, dirpath: Path) -> List[Path]:
        """
        Recursive, sorted file discovery. Symlinks are never followed so
        link loops cannot trap the walk.
        """
        dirpath = Path(dirpath)
        targets = []

        for root, dirnames, filenames in os.walk(dirpath):
            rel_root = Path(root).relative_to(dirpath)
            # Prune in place so excluded trees are never entered
            dirnames[:] = sorted(d for d in dirnames if not self.config.excludes_dir(rel_root / d))
            for name in sorted(filenames):
                candidate = Path(root) / name
                if candidate.is_symlink() or not candidate.is_file():
                    continue
                if self.config.wants_file(candidate):
                    targets.append(candidate)

        return targets

    def _try_analyze(self, filepath: Path) -> Optional[FileAnalysis]:
        try:
            return self.analyze_file(filepath)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping unreadable file {filepath}: {e}")
            return None

    def analyze_dir(self, dirpath: Path,
                    progress_callback: Optional[Callable[[int, int], None]] = None) -> DirectoryAnalysis:
        """
        Scans a directory tree. Files are independent, so with
        max_workers > 1 they are classified on a thread pool; results are
        joined and ordered by path before the report is built.
        """
        targets = self.discover_files(dirpath)
        total = len(targets)
        analyses: List[FileAnalysis] = []

        def collect(result: Optional[FileAnalysis], processed: int):
            if result is not None:
                analyses.append(result)
            if progress_callback:
                progress_callback(processed, total)

        if self.config.max_workers > 1 and total > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                for processed, result in enumerate(pool.map(self._try_analyze, targets), 1):
                    collect(result, processed)
        else:
            for processed, filepath in enumerate(targets, 1):
                collect(self._try_analyze(filepath), processed)

        analyses.sort(key=lambda a: str(a.metadata.filepath))
        return DirectoryAnalysis(
            total_files_scanned=len(analyses),
            last_scan_on=datetime.now(timezone.utc),
            file_analyses=analyses,
        )

    def generate_summary(self, result: AnalysisResult) -> dict:
        """Counts per report, for the CLI summary panel."""
        files = result.file_analyses if isinstance(result, DirectoryAnalysis) else [result]
        return {
            "total_files": len(files),
            "valid": sum(len(f.valids) for f in files),
            "invalid": sum(len(f.invalids) for f in files),
            "files_with_todos": sum(1 for f in files if f.valids or f.invalids),
        }

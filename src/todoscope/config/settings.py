#!/usr/bin/env python3
"""
TODOSCOPE SETTINGS
------------------
Scan configuration: which files to include, which directories to skip,
whether to ask git for provenance, and how many files to classify at once.

Settings come from an optional `.todoscope.yaml` in the scan root and are
then overridden by CLI flags.

Author: TodoScope Team
Date: 2026-10-18
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ruamel.yaml import YAML, YAMLError

logger = logging.getLogger("todoscope.config")

CONFIG_FILENAME = ".todoscope.yaml"


@dataclass(frozen=True)
class AnalysisConfig:
    # File suffixes to scan ("rs" or ".rs"); None scans every file
    include_extensions: Optional[Tuple[str, ...]] = None
    # Bare names ("target") are skipped at any depth; entries with a "/"
    # ("vendor/lib") are paths relative to the scan root
    exclude_dirs: Tuple[str, ...] = (".git",)
    blame: bool = True
    max_workers: int = 1

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.include_extensions is not None:
            normalized = tuple(self._normalize_ext(e) for e in self.include_extensions)
            object.__setattr__(self, "include_extensions", normalized)
        object.__setattr__(self, "exclude_dirs", tuple(self._normalize_dir(d) for d in self.exclude_dirs))

    @staticmethod
    def _normalize_ext(ext: str) -> str:
        ext = ext.strip().lower()
        return ext if ext.startswith(".") else f".{ext}"

    @staticmethod
    def _normalize_dir(entry: str) -> str:
        entry = entry.strip().replace("\\", "/")
        while entry.startswith("./"):
            entry = entry[2:]
        entry = entry.strip("/")
        if not entry:
            raise ValueError("exclude_dirs entries must not be empty")
        return entry

    def wants_file(self, path: Path) -> bool:
        if self.include_extensions is None:
            return True
        return path.suffix.lower() in self.include_extensions

    def excludes_dir(self, rel_path: Path) -> bool:
        """`rel_path` is the directory's path relative to the scan root."""
        rel = rel_path.as_posix()
        for entry in self.exclude_dirs:
            if "/" in entry:
                if rel == entry:
                    return True
            elif rel_path.name == entry:
                return True
        return False


def _expect_str_list(key: str, value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Config key '{key}' must be a list of strings")
    return tuple(value)


def _parse_mapping(data: Dict[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(AnalysisConfig)}
    parsed: Dict[str, Any] = {}

    for key, value in data.items():
        if key not in known:
            raise ValueError(f"Unknown config key '{key}'")

        if key == "include_extensions" and value is None:
            parsed[key] = None
        elif key in ("include_extensions", "exclude_dirs"):
            parsed[key] = _expect_str_list(key, value)
        elif key == "blame":
            if not isinstance(value, bool):
                raise ValueError("Config key 'blame' must be true or false")
            parsed[key] = value
        elif key == "max_workers":
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError("Config key 'max_workers' must be an integer")
            parsed[key] = value

    return parsed


def load_config(path: Path) -> AnalysisConfig:
    """
    Reads a YAML mapping into an AnalysisConfig.
    Raises ValueError for malformed YAML, unknown keys and wrong types.
    """
    yaml = YAML(typ="safe")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.load(f)
    except YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}")

    if data is None:
        return AnalysisConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    logger.debug(f"Loaded config from {path}")
    return AnalysisConfig(**_parse_mapping(data))


def find_config(root: Path) -> Optional[Path]:
    """Looks for `.todoscope.yaml` in the scan root (or a file's directory)."""
    root = Path(root)
    base = root if root.is_dir() else root.parent
    candidate = base / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def merge_overrides(config: AnalysisConfig, **overrides: Any) -> AnalysisConfig:
    """Applies CLI values on top of file values; None means "not given"."""
    given = {k: v for k, v in overrides.items() if v is not None}
    return replace(config, **given) if given else config

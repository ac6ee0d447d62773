#!/usr/bin/env python3
"""
TODOSCOPE EXPORTER - Machine-Readable Reports
---------------------------------------------
Turns analysis results into plain dicts and dumps them as JSON or YAML.

Author: TodoScope Team
Date: 2026-10-18
"""

import io
import json
from typing import Any, Dict, Optional

from ruamel.yaml import YAML

from todoscope.core.models import (
    AnalysisResult,
    BlameInfo,
    DelimitedField,
    DirectoryAnalysis,
    FileAnalysis,
    InvalidTodo,
    TodoResult,
    ValidTodo,
)

SUPPORTED_FORMATS = ("json", "yaml")


class ReportExporter:
    """
    The Serializer: a pure transform over analysis records.
    """

    def __init__(self):
        self.yaml = YAML(typ="rt")
        self.yaml.default_flow_style = False
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096

    def _blame_to_dict(self, blame: Optional[BlameInfo]) -> Optional[Dict[str, Any]]:
        if blame is None:
            return None
        return {"email": blame.email, "timestamp": blame.timestamp.isoformat()}

    def _field_to_dict(self, field: DelimitedField) -> Dict[str, Any]:
        return {"delimiter_type": field.kind.display_name, "content": field.content}

    def todo_to_dict(self, todo: TodoResult) -> Dict[str, Any]:
        if isinstance(todo, ValidTodo):
            return {
                "line": todo.line,
                "comment": todo.comment,
                "delimiters": [self._field_to_dict(f) for f in todo.delimiters],
                "blame": self._blame_to_dict(todo.blame),
            }
        if isinstance(todo, InvalidTodo):
            return {
                "line": todo.line,
                "full_text": todo.full_text,
                "blame": self._blame_to_dict(todo.blame),
            }
        raise TypeError(f"Not a todo record: {type(todo).__name__}")

    def file_to_dict(self, analysis: FileAnalysis) -> Dict[str, Any]:
        return {
            "metadata": {
                "filepath": str(analysis.metadata.filepath),
                "last_modified": analysis.metadata.last_modified.isoformat(),
            },
            "valids": [self.todo_to_dict(t) for t in analysis.valids],
            "invalids": [self.todo_to_dict(t) for t in analysis.invalids],
        }

    def to_dict(self, result: AnalysisResult) -> Dict[str, Any]:
        """Wraps the payload in a `file` or `directory` key."""
        if isinstance(result, DirectoryAnalysis):
            return {
                "directory": {
                    "total_files_scanned": result.total_files_scanned,
                    "last_scan_on": result.last_scan_on.isoformat(),
                    "file_analyses": [self.file_to_dict(f) for f in result.file_analyses],
                }
            }
        if isinstance(result, FileAnalysis):
            return {"file": self.file_to_dict(result)}
        raise TypeError(f"Not an analysis result: {type(result).__name__}")

    def export(self, result: AnalysisResult, fmt: str = "json") -> str:
        payload = self.to_dict(result)

        if fmt == "json":
            return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
        if fmt == "yaml":
            stream = io.StringIO()
            self.yaml.dump(payload, stream)
            return stream.getvalue()

        raise ValueError(f"Unsupported format '{fmt}'. Choose from: {', '.join(SUPPORTED_FORMATS)}")

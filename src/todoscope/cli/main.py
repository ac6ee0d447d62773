#!/usr/bin/env python3
"""
TODOSCOPE CLI
-------------
Command-line front end: `scan` walks a file or directory and reports
every `// todo` marker, `classify` checks a single line.

Exit codes:
- 0: scan completed
- 1: invalid todos found and --fail-on-invalid was given
- 2: runtime failure (missing path, unreadable file, bad config)

Author: TodoScope Team
Date: 2026-10-18
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    BarColumn,
    TaskProgressColumn
)

from todoscope.analysis.line_analyzer import LineAnalyzer
from todoscope.cli.formatter import TodoFormatter
from todoscope.config.settings import AnalysisConfig, find_config, load_config, merge_overrides
from todoscope.core.engine import AnalysisEngine
from todoscope.reporting.exporter import SUPPORTED_FORMATS, ReportExporter

__version__ = "0.1.0"

EXIT_OK = 0
EXIT_INVALID_FOUND = 1
EXIT_FAILURE = 2

# Global console for consistent styling across the application
console = Console()
err_console = Console(stderr=True)


class TodoScopeCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    """

    def __init__(self, out: Optional[Console] = None):
        self.console = out or console
        self.parser = argparse.ArgumentParser(
            prog="todoscope",
            description="TodoScope - find and validate structured `// todo` comments",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("-v", "--version", action="version", version=f"todoscope v{__version__}")
        self.parser.add_argument("--verbose", action="store_true", help="Enable debug logging on stderr")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        scan_parser = subparsers.add_parser("scan", help="Scan a file or directory for todo markers")
        scan_parser.add_argument("path", help="Path to a file or directory")
        scan_parser.add_argument("--format", choices=("text",) + SUPPORTED_FORMATS, default="text",
                                 help="Output format (default: text)")
        scan_parser.add_argument("-o", "--output", help="Write the json/yaml report to this file instead of stdout")
        scan_parser.add_argument("--ext", action="append", dest="extensions", metavar="EXT",
                                 help="Only scan files with this extension (repeatable)")
        scan_parser.add_argument("--exclude-dir", action="append", dest="exclude_dirs", metavar="DIR",
                                 help="Skip directories with this name, or this path relative to PATH (repeatable)")
        scan_parser.add_argument("--no-blame", action="store_true", help="Do not attach git provenance")
        scan_parser.add_argument("--workers", type=int, help="Files to classify in parallel")
        scan_parser.add_argument("--config", help="Config file (default: .todoscope.yaml in PATH)")
        scan_parser.add_argument("--fail-on-invalid", action="store_true",
                                 help="Exit with status 1 when invalid todos are found")

        classify_parser = subparsers.add_parser("classify", help="Classify a single line of text")
        classify_parser.add_argument("line", help="The line to classify, e.g. '// todo(abc): fix'")

    def print_header(self, subtitle: str):
        self.console.print(Panel.fit(
            f"[bold cyan]TodoScope v{__version__}[/bold cyan]",
            title=f"[bold white]{subtitle}[/bold white]",
            border_style="cyan"
        ))

    def _build_config(self, args: argparse.Namespace, target: Path) -> AnalysisConfig:
        config_path = Path(args.config) if args.config else find_config(target)
        config = load_config(config_path) if config_path else AnalysisConfig()

        exclude_dirs = None
        if args.exclude_dirs:
            exclude_dirs = tuple(config.exclude_dirs) + tuple(args.exclude_dirs)

        return merge_overrides(
            config,
            include_extensions=tuple(args.extensions) if args.extensions else None,
            exclude_dirs=exclude_dirs,
            blame=False if args.no_blame else None,
            max_workers=args.workers,
        )

    def _run_scan(self, args: argparse.Namespace) -> int:
        target = Path(args.path)
        if not target.exists():
            err_console.print(f"[bold red]Error:[/bold red] Path '{args.path}' not found.")
            return EXIT_FAILURE

        try:
            config = self._build_config(args, target)
        except (OSError, ValueError) as e:
            err_console.print(f"[bold red]Config error:[/bold red] {e}")
            return EXIT_FAILURE

        engine = AnalysisEngine.for_path(target, config)

        try:
            if target.is_dir() and args.format == "text":
                result = self._scan_with_progress(engine, target)
            else:
                result = engine.analyze_path(target)
        except (OSError, UnicodeDecodeError) as e:
            err_console.print(f"[bold red]Error reading {target}:[/bold red] {e}")
            return EXIT_FAILURE

        summary = engine.generate_summary(result)

        if args.format == "text":
            self.print_header("Todo Scan")
            TodoFormatter(self.console).print_report(result, summary)
        else:
            report = ReportExporter().export(result, args.format)
            if args.output:
                Path(args.output).write_text(report, encoding="utf-8")
            else:
                sys.stdout.write(report)

        if args.fail_on_invalid and summary["invalid"]:
            return EXIT_INVALID_FOUND
        return EXIT_OK

    def _scan_with_progress(self, engine: AnalysisEngine, target: Path):
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=err_console,
            transient=True
        ) as progress:
            task_id = progress.add_task("Scanning files...", total=None)

            def advance(processed: int, total: int):
                progress.update(task_id, completed=processed, total=total)

            return engine.analyze_dir(target, progress_callback=advance)

    def _run_classify(self, args: argparse.Namespace) -> int:
        analyzer = LineAnalyzer()
        result = analyzer.process(args.line, 0)
        TodoFormatter(self.console).print_classification(args.line, result)
        return EXIT_OK

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        argv = sys.argv[1:] if argv is None else argv
        if not argv:
            self.print_header("Structured Todo Scanner")
            self.parser.print_help()
            return EXIT_OK

        args = self.parser.parse_args(argv)
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )

        if args.command == "scan":
            return self._run_scan(args)
        if args.command == "classify":
            return self._run_classify(args)

        self.parser.print_help()
        return EXIT_OK


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(TodoScopeCLI().run())
    except KeyboardInterrupt:
        err_console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(130)


if __name__ == "__main__":
    main()

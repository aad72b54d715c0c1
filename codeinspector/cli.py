"""CLI entrypoints for codeinspector commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .engine import PipelineEngine
from .errors import InspectorError
from .logging import configure_logging, progress_logger
from .models import ProjectContext
from .report import render_json, render_markdown


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codeinspector",
        description="Statically analyze PHP, JavaScript/TypeScript and Vue projects.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Run the analysis pipeline over a project tree.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    analyze_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    analyze_parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="NAME",
        help="Folder or file name to exclude (repeatable).",
    )
    analyze_parser.add_argument(
        "--project-type",
        default="auto",
        help="Project type hint used to locate entry points (php, nodejs, spa, telegram-php, ...).",
    )
    analyze_parser.add_argument(
        "--framework",
        default=None,
        help="Framework hint marked as primary in the stack profile.",
    )
    analyze_parser.add_argument(
        "--format",
        choices=("json", "markdown"),
        default="json",
        help="Output format (defaults to json).",
    )
    analyze_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Write the report to this file instead of stdout.",
    )
    analyze_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write a debug-level log of the run to this file.",
    )
    analyze_parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only log warnings and errors.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve the analysis pipeline over HTTP.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for codeinspector commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(getattr(args, "quiet", False)),
        log_file=getattr(args, "log_file", None),
    )

    if args.command == "analyze":
        project = ProjectContext(
            root_path=args.path,
            excluded_folders=list(args.exclude) + _reserved_outputs(args.path, args.output),
            project_type=args.project_type,
            framework=args.framework,
        )
        try:
            report = PipelineEngine().run(project, progress=progress_logger())
        except (InspectorError, ConfigError) as exc:
            parser.exit(1, f"codeinspector analyze failed: {exc}\n")

        rendered = render_markdown(report) if args.format == "markdown" else render_json(report)
        if args.output is None:
            sys.stdout.write(rendered)
        else:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(rendered, encoding="utf-8")
            print(f"Report written to {_relativize(args.output)}")
    elif args.command == "serve":  # pragma: no cover - integration path
        from .service.app import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _reserved_outputs(root: str, output: Path | None) -> list[str]:
    """Keep a report written inside the analyzed tree out of later runs."""
    if output is None:
        return []
    try:
        relative = output.resolve().relative_to(Path(root).resolve()).as_posix()
    except ValueError:
        return []
    return [relative] if relative != "." else []


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])

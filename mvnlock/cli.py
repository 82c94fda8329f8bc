"""CLI entrypoints for mvnlock commands."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path

from .assembler import check_lock_document, load_raw_dependencies
from .config import ConfigError, load_config
from .descriptor import load_descriptor
from .errors import LockError
from .logging import configure_logging
from .pipeline import LockfileGenerator


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


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write timestamped log records to this file.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mvnlock",
        description="Generate reproducible lock files from a populated Maven repository.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Write a lock file for a project whose dependencies are already resolved.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_log_file_option(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "--cache-dir",
        required=True,
        help="Local Maven repository populated by the build.",
    )
    generate_parser.add_argument(
        "--descriptor",
        required=True,
        help="Effective project document (JSON or effective-pom XML).",
    )
    generate_parser.add_argument(
        "--output",
        required=True,
        help="Destination lock-file path.",
    )
    generate_parser.add_argument(
        "--deps",
        help="File with one pre-serialized dependency fragment per line.",
    )
    generate_parser.add_argument(
        "--project-root",
        help="Working-copy root used to relativize module build paths.",
    )
    generate_parser.add_argument(
        "--config",
        help="Path to .mvnlock.yml (defaults to the project root).",
    )
    generate_parser.add_argument(
        "--no-add",
        action="store_true",
        help="Do not register artifacts in the content-addressed store.",
    )
    generate_parser.add_argument(
        "--verify-digests",
        action="store_true",
        help="Recompute each artifact's sha1 and compare it with its digest file.",
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Verify that an existing lock file is readable by a fetcher.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    _add_log_file_option(check_parser, suppress_default=True)
    check_parser.add_argument("path", help="Lock file to check.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for mvnlock commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    if args.command == "generate":
        _run_generate(parser, args)
    elif args.command == "check":
        _run_check(parser, args)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_generate(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    project_root = Path(args.project_root).expanduser().resolve() if args.project_root else None
    config_path = Path(args.config) if args.config else (project_root or Path.cwd())

    try:
        config = load_config(config_path)
        if project_root is not None:
            config = replace(config, project_root=project_root)
        if args.verify_digests:
            config = replace(config, verify_digests=True)

        descriptor = load_descriptor(Path(args.descriptor))
        deps = load_raw_dependencies(Path(args.deps)) if args.deps else []
        outcome = LockfileGenerator(config).run(
            cache_dir=Path(args.cache_dir),
            descriptor=descriptor,
            deps=deps,
            output=Path(args.output),
            no_add=bool(args.no_add),
        )
    except (ConfigError, LockError, OSError, UnicodeDecodeError) as exc:
        parser.exit(1, f"mvnlock generate failed: {exc}\nRun with --verbose for more details.\n")
    print(f"Lock file written to {_relativize(outcome.path)}")


def _run_check(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    path = Path(args.path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        parser.exit(1, f"Cannot read lock file {path}: {exc}\n")

    problems = check_lock_document(data)
    if problems:
        parser.exit(1, "".join(f"{path}: {problem}\n" for problem in problems))
    print(f"{_relativize(path)} is a valid lock file")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])

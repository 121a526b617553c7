"""Command line interface for the workspace organizer."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .classifier import ClassificationEngine
from .config import DEFAULT_RULES, OrganizeOptions, RuleSet
from .folders import create_folder_structure, parse_folder_specs
from .logger import configure_logging, next_log_path
from .models import StatusEvent
from .organizer import WorkspaceOrganizer
from .reporting import render_report
from .rules import RulesValidationError, dump_rule_set, load_rule_set, validate_rules
from .utils.fs import WorkspacePathError


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "handler"):
        parser.print_help()
        return 1
    return args.handler(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="workspace-organizer", description="Workspace organizer CLI")
    subparsers = parser.add_subparsers(dest="command")

    organize = subparsers.add_parser("organize", help="Sort a folder into category folders")
    organize.add_argument("path", nargs="?", default="/", help="Workspace-relative folder (default: /)")
    organize.add_argument("--workspace", type=Path, default=Path.cwd(), help="Workspace root directory")
    organize.add_argument("--include-nested", action="store_true", help="Also sort files in immediate subfolders")
    organize.add_argument("--rules", type=Path, help="JSON rules file replacing the default categories")
    organize.add_argument("--format", choices=["text", "markdown", "json"], default="text")
    organize.add_argument("--details", action="store_true", help="List every affected file")
    organize.add_argument("--output", type=Path)
    organize.add_argument(
        "--log",
        nargs="?",
        const="",
        help="Write JSON log lines to this file (a timestamped file under ~/.workspace_organizer/logs if omitted)",
    )
    organize.add_argument("--verbose", action="store_true")
    organize.set_defaults(handler=_handle_organize)

    classify = subparsers.add_parser("classify", help="Show the category of file names")
    classify.add_argument("names", nargs="+")
    classify.add_argument("--rules", type=Path)
    classify.set_defaults(handler=_handle_classify)

    mkdirs = subparsers.add_parser("mkdirs", help="Create a folder structure from a JSON file")
    mkdirs.add_argument("spec", type=Path, help="JSON list of names or {name, children} objects")
    mkdirs.add_argument("--workspace", type=Path, default=Path.cwd())
    mkdirs.add_argument("--base", default="/", help="Workspace-relative base folder")
    mkdirs.set_defaults(handler=_handle_mkdirs)

    rules_parser = subparsers.add_parser("rules", help="Rules management")
    rules_sub = rules_parser.add_subparsers(dest="rules_command")

    rules_validate = rules_sub.add_parser("validate", help="Validate a rules file")
    rules_validate.add_argument("rules_file", type=Path)
    rules_validate.set_defaults(handler=_handle_rules_validate)

    rules_show = rules_sub.add_parser("show", help="Print the default rules as JSON")
    rules_show.add_argument("--output", type=Path)
    rules_show.set_defaults(handler=_handle_rules_show)

    return parser


def _load_rules(path: Path | None) -> RuleSet:
    return load_rule_set(path) if path else DEFAULT_RULES


def _handle_organize(args: argparse.Namespace) -> int:
    if args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO if args.log is not None else logging.WARNING
    log_path = None
    if args.log is not None:
        log_path = Path(args.log) if args.log else next_log_path("organize")
    logger = configure_logging(log_path, level=level)
    try:
        rules = _load_rules(args.rules)
    except (OSError, RulesValidationError) as exc:
        print(f"Invalid rules: {exc}", file=sys.stderr)
        return 1

    def emit_status(event: StatusEvent) -> None:
        if event.stage == "tool_error":
            print(f"Permission problem: {event.detail}", file=sys.stderr)

    organizer = WorkspaceOrganizer(
        args.workspace,
        OrganizeOptions(include_nested=args.include_nested, rules=rules),
        emit_status=emit_status,
        logger=logger,
    )
    try:
        report = organizer.organize(args.path)
    except WorkspacePathError as exc:
        print(f"Organize failed: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        logger.error("Organize failed: %s", exc)
        print(f"Organize failed: {exc}", file=sys.stderr)
        return 1

    rendered = render_report(report.to_dict(), args.format, detailed=args.details)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(rendered + "\n", encoding="utf-8")
        print(f"Report written to {args.output}")
    else:
        print(rendered)
    return 0


def _handle_classify(args: argparse.Namespace) -> int:
    try:
        engine = ClassificationEngine(_load_rules(args.rules))
    except (OSError, RulesValidationError) as exc:
        print(f"Invalid rules: {exc}", file=sys.stderr)
        return 1
    for name in args.names:
        print(f"{name}\t{engine.classify(name)}")
    return 0


def _handle_mkdirs(args: argparse.Namespace) -> int:
    try:
        specs = parse_folder_specs(json.loads(args.spec.read_text(encoding="utf-8")))
    except FileNotFoundError:
        print(f"Spec file not found: {args.spec}", file=sys.stderr)
        return 1
    except (json.JSONDecodeError, ValueError) as exc:
        print(f"Invalid folder spec: {exc}", file=sys.stderr)
        return 1
    try:
        result = create_folder_structure(args.workspace, specs, args.base)
    except WorkspacePathError as exc:
        print(f"mkdirs failed: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 1 if result.errors else 0


def _handle_rules_validate(args: argparse.Namespace) -> int:
    try:
        validate_rules(args.rules_file)
    except RulesValidationError as exc:
        print(f"Validation failed: {exc}", file=sys.stderr)
        return 1
    except FileNotFoundError:
        print(f"Rules file not found: {args.rules_file}", file=sys.stderr)
        return 1
    else:
        print("Rules file is valid.")
        return 0


def _handle_rules_show(args: argparse.Namespace) -> int:
    payload = json.dumps(dump_rule_set(), indent=2, ensure_ascii=False)
    if args.output:
        args.output.write_text(payload + "\n", encoding="utf-8")
        print(f"Rules written to {args.output}")
    else:
        print(payload)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

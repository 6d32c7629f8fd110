#!/usr/bin/env python3
"""
typearch-guard - Type architecture checks for TypeScript projects

Main entry point: discovers the project's files from tsconfig.json, runs the
selected checks and reports their combined result.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .core.base_enforcer import BaseEnforcer, ProjectContext
from .core.config import CONFIG_FILE_NAME, Config
from .core.errors import ConfigError
from .core.files import TSCONFIG_NAME
from .core.violation import CRITICAL, CheckResult, Violation, ViolationReporter

logger = logging.getLogger(__name__)

MISSING_TSCONFIG_HINT = [
    "Create a tsconfig.json in your project root",
    "Ensure the file is valid JSON",
]


def parse_check_list(value: str) -> list[str]:
    """Parse a comma-separated ``--checks`` value."""
    checks = [name.strip() for name in value.split(",") if name.strip()]
    if not checks:
        raise argparse.ArgumentTypeError("no checks given")
    unknown = [name for name in checks if name not in BaseEnforcer.CHECK_MAP]
    if unknown:
        available = ", ".join(BaseEnforcer.available_checks())
        raise argparse.ArgumentTypeError(
            f"unknown check(s): {', '.join(unknown)} (available: {available})"
        )
    return checks


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="typearch-guard",
        description="Keep TypeScript types in type modules and find duplicated type shapes",
    )
    parser.add_argument(
        "--checks",
        type=parse_check_list,
        default=None,
        help=(
            "Comma-separated checks to run "
            f"(default: all of {', '.join(BaseEnforcer.available_checks())})"
        ),
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="GLOB",
        help="Additional exclude pattern, relative to the project root (repeatable)",
    )
    parser.add_argument(
        "--allow-exports",
        action="append",
        default=[],
        metavar="GLOB",
        help="Files exempt from the type-exports check (repeatable)",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Project root containing tsconfig.json (default: current directory)",
    )
    parser.add_argument(
        "--jobs",
        type=positive_int,
        default=None,
        help="Number of files analyzed in parallel (default: 1)",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def select_checks(requested: Optional[Sequence[str]], config: Config) -> list[str]:
    """Checks to run: command line first, then the config file, then all.

    Raises:
        ConfigError: if the config file names an unknown check
    """
    if requested is not None:
        names: Sequence[str] = requested
    elif config.checks is not None:
        unknown = [name for name in config.checks if name not in BaseEnforcer.CHECK_MAP]
        if unknown:
            raise ConfigError(f"{CONFIG_FILE_NAME}: unknown check(s): {', '.join(unknown)}")
        names = config.checks
    else:
        names = BaseEnforcer.available_checks()
    # Keep the first occurrence of each name
    return list(dict.fromkeys(names))


def missing_tsconfig() -> Violation:
    return Violation(
        file_path=TSCONFIG_NAME,
        line_num=None,
        violation_type="Missing Project Configuration",
        message=f"No {TSCONFIG_NAME} found in project root",
        severity=CRITICAL,
    )


def run_checks(context: ProjectContext, checks: Sequence[str]) -> list[CheckResult]:
    results = []
    for check_name in checks:
        enforcer = BaseEnforcer.create(check_name, context)
        logger.info("Running %s", check_name)
        results.append(enforcer.run())
    return results


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for typearch-guard."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    root = (args.root or Path.cwd()).resolve()
    reporter = ViolationReporter(output_format=args.format)

    # Without a project there is nothing to configure
    if not (root / TSCONFIG_NAME).is_file():
        return reporter.report_fatal(missing_tsconfig(), MISSING_TSCONFIG_HINT)

    try:
        config = Config(root)
        checks = select_checks(args.checks, config)
        context = ProjectContext.load(
            root,
            config=config,
            exclude=args.exclude,
            allow_exports=args.allow_exports,
            jobs=args.jobs,
        )
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if context is None:
        return reporter.report_fatal(missing_tsconfig(), MISSING_TSCONFIG_HINT)

    for result in run_checks(context, checks):
        reporter.add_result(result)
    return reporter.report()


if __name__ == "__main__":
    sys.exit(main())

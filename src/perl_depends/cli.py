#!/usr/bin/env python3
"""
perl-depends command line.
Instruments each FILE into FILE+EXT; the user runs the copy to see the report.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .docs import render_html, render_man, render_text, version_line
from .main import load_config, run_classify, run_instrument, setup_logging
from .models import DependsConfig


def _extension(value: str) -> str:
    if not value:
        raise argparse.ArgumentTypeError("Extension must not be empty")
    return value


def _non_negative_int(value: str) -> int:
    ivalue = int(value)
    if ivalue < 0:
        raise argparse.ArgumentTypeError("Value must be >= 0")
    return ivalue


class DependsArgumentParser(argparse.ArgumentParser):
    """ArgumentParser where a bare --verbose only takes a numeric LEVEL."""

    def parse_known_args(self, args=None, namespace=None):
        if args is None:
            args = sys.argv[1:]
        return super().parse_known_args(_normalize_verbose(list(args)), namespace)


def _normalize_verbose(argv: List[str]) -> List[str]:
    normalized = []
    index = 0
    while index < len(argv):
        token = argv[index]
        if token == "--":
            normalized.extend(argv[index:])
            break
        if token == "--verbose":
            following = argv[index + 1] if index + 1 < len(argv) else ""
            if following.isdigit():
                normalized.append(f"--verbose={following}")
                index += 2
                continue
            token = "--verbose=1"
        normalized.append(token)
        index += 1
    return normalized


def build_parser() -> argparse.ArgumentParser:
    parser = DependsArgumentParser(
        prog="perl-depends",
        description="Roughly find out module dependencies from Perl file(s)",
        add_help=False,
    )
    parser.add_argument("files", nargs="*", metavar="FILE", help="Perl files to instrument")
    parser.add_argument("-e", "--extension", type=_extension, help="Extension for instrumented files (default .tmp)")
    parser.add_argument("-h", "--help", action="store_true", help="Print text help")
    parser.add_argument("--help-html", action="store_true", help="Print help in HTML format")
    parser.add_argument("--help-man", action="store_true", help="Print help in man(1) format")
    # -v never takes a value so "-v file.pl" keeps file.pl positional
    parser.add_argument("-v", dest="verbose", action="count", help="Print informational messages (repeatable)")
    parser.add_argument(
        "--verbose",
        dest="verbose",
        nargs="?",
        const=1,
        type=_non_negative_int,
        metavar="LEVEL",
        help="Verbosity LEVEL; a non-numeric next argument stays a FILE",
    )
    parser.add_argument("-V", "--version", action="store_true", help="Print version information")
    parser.add_argument("--config", help="Path to config YAML")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--log-file", help="Log file location")
    parser.add_argument("--corelist", help="File listing the standard Perl modules")
    parser.add_argument("--classify", metavar="DUMP", help="Classify a %%INC dump ('-' for stdin)")
    return parser


def apply_overrides(config: DependsConfig, args: argparse.Namespace) -> DependsConfig:
    updates = {}
    if args.extension:
        updates["extension"] = args.extension
    if args.verbose is not None:
        updates["verbose"] = args.verbose
    if args.log_level:
        updates["log_level"] = args.log_level
    if args.log_file:
        updates["log_file"] = args.log_file
    if args.corelist:
        updates["corelist_file"] = args.corelist

    return DependsConfig.model_validate({**config.model_dump(), **updates})


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(version_line())
        return 0
    if args.help:
        print(render_text())
        return 0
    if args.help_man:
        sys.stdout.write(render_man())
        return 0
    if args.help_html:
        sys.stdout.write(render_html())
        return 0

    config = load_config(args.config)
    config = apply_overrides(config, args)

    setup_logging(config)

    if args.classify:
        return run_classify(args.classify, config)
    if not args.files:
        parser.error("no input files")

    try:
        return run_instrument(args.files, config)
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())

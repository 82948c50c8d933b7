from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import yaml
from rich.console import Console
from rich.table import Table

from .corelist import resolve_corelist
from .models import DependencyReport, DependsConfig, PatchResult
from .patcher import instrument_files
from .reporter import classify, parse_ledger_dump

logger = logging.getLogger(__name__)
console = Console(stderr=True)


def effective_log_level(config: DependsConfig) -> int:
    if config.log_level:
        return getattr(logging, config.log_level, logging.WARNING)
    if config.verbose >= 2:
        return logging.DEBUG
    if config.verbose == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(config: DependsConfig) -> None:
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    logging.getLogger().handlers.clear()

    # stdout carries hint lines and reports only
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logging.getLogger().addHandler(console_handler)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)

    logging.getLogger().setLevel(effective_log_level(config))


def load_config(config_path: Optional[str]) -> DependsConfig:
    if not config_path:
        return DependsConfig()
    try:
        with open(config_path, "r") as fh:
            data = yaml.safe_load(fh) or {}
        return DependsConfig(**data)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", config_path)
    except Exception as exc:
        logger.warning("Config load failed (%s); using defaults", exc)
    return DependsConfig()


def render_summary(results: List[PatchResult]) -> None:
    action_colors = {
        "appended": "green",
        "injected": "cyan",
        "unchanged": "yellow",
        "skipped": "red",
    }

    table = Table(title="Instrumented Files", show_header=True)
    table.add_column("Source", style="cyan")
    table.add_column("Destination", style="magenta")
    table.add_column("Action")
    table.add_column("Error", style="red")

    for result in results:
        color = action_colors.get(result.action, "white")
        table.add_row(
            result.source,
            result.destination,
            f"[{color}]{result.action}[/{color}]",
            result.error or "",
        )

    console.print(table)


def run_instrument(files: Sequence[str], config: DependsConfig) -> int:
    results = instrument_files([Path(f) for f in files], config)

    skipped = [r for r in results if not r.written]
    if config.verbose:
        render_summary(results)
    if skipped:
        logger.info("%d of %d file(s) skipped", len(skipped), len(results))
        return 1
    return 0


def read_ledger_dump(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def run_classify(source: str, config: DependsConfig) -> int:
    """Classify a saved %INC dump the same way the instrumented code does."""
    try:
        text = read_ledger_dump(source)
    except OSError as exc:
        logger.error("Cannot read ledger dump %s: %s", source, exc)
        return 2

    report: DependencyReport = classify(
        parse_ledger_dump(text), resolve_corelist(config), config
    )
    sys.stdout.write(report.render())
    return report.exit_status

"""
Reference lists of modules bundled with the standard Perl distribution.

The reporter only needs ``find_modules(pattern)``, the same call
Module::CoreList offers, so any source of names can stand in for it.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Iterable, List, Protocol, Union

import yaml

from .errors import CorelistUnavailable
from .models import DependsConfig

logger = logging.getLogger(__name__)

Pattern = Union[str, "re.Pattern[str]"]

PERL_QUERY = 'print "$_\\n" for Module::CoreList->find_modules(qr/./)'


class CoreModuleIndex(Protocol):
    def find_modules(self, pattern: Pattern) -> List[str]:
        ...


def compile_pattern(pattern: Pattern) -> "re.Pattern[str]":
    """Compile a module name used as a pattern, literally if it is not a valid one."""
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error:
        return re.compile(re.escape(pattern))


class EmptyCoreList:
    """Fallback when no reference list is available: nothing is standard."""

    def find_modules(self, pattern: Pattern) -> List[str]:
        return []

    def __len__(self) -> int:
        return 0


class StaticCoreList:
    def __init__(self, names: Iterable[str]):
        self.names = sorted({name.strip() for name in names if name and name.strip()})

    def find_modules(self, pattern: Pattern) -> List[str]:
        regex = compile_pattern(pattern)
        return [name for name in self.names if regex.search(name)]

    def __len__(self) -> int:
        return len(self.names)


def load_corelist_file(path: Union[str, Path]) -> StaticCoreList:
    """
    Load module names from ``path``.

    Accepted layouts: a YAML list, a YAML mapping with a ``modules`` list,
    or plain text with one name per line (``#`` starts a comment).
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CorelistUnavailable(f"Cannot read {path}: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError:
        data = None

    if isinstance(data, dict):
        data = data.get("modules")
    if isinstance(data, list):
        return StaticCoreList(str(item) for item in data)

    names = []
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if line:
            names.append(line)
    return StaticCoreList(names)


def query_perl_corelist(perl: str = "perl", timeout: float = 60.0) -> StaticCoreList:
    """Ask the local interpreter for every module Module::CoreList knows."""
    cmd = [perl, "-MModule::CoreList", "-e", PERL_QUERY]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
            stdin=subprocess.DEVNULL,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise CorelistUnavailable(f"{perl} could not be queried: {exc}") from exc

    if result.returncode != 0:
        stderr_tail = "\n".join((result.stderr or "").splitlines()[-5:])
        raise CorelistUnavailable(
            f"Module::CoreList query exited with code {result.returncode}: {stderr_tail}"
        )
    return StaticCoreList(result.stdout.splitlines())


def resolve_corelist(config: DependsConfig) -> CoreModuleIndex:
    try:
        if config.corelist_file:
            index = load_corelist_file(config.corelist_file)
        else:
            index = query_perl_corelist(config.perl)
    except CorelistUnavailable as exc:
        logger.warning("Standard module list unavailable (%s); reporting every module", exc)
        return EmptyCoreList()

    logger.info("Loaded %d standard module names", len(index))
    return index

"""
Python rendition of the injected report routine.

Given the contents of Perl's %INC (keys and values flattened into one
list, as ``join ' ', %INC`` does) it derives ``::`` module names and keeps
the ones the reference list does not recognize. Matching uses the derived
name as a pattern against the reference list, so the result is an
approximation: a coincidental substring hit hides an external module and a
path that does not reduce to a clean name is reported as external.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .corelist import CoreModuleIndex, EmptyCoreList
from .models import DependencyEntry, DependencyReport, DependsConfig

logger = logging.getLogger(__name__)

LEDGER_NOISE_RE = re.compile(r"5.\d\d|^[\w.]+$", re.ASCII)
EXTENSION_RE = re.compile(r"\..*")

Ledger = Union[Mapping[str, str], Iterable[str]]


def ledger_entries(ledger: Ledger) -> List[str]:
    """Flatten %INC (mapping or dump tokens) into sorted whitespace separated tokens."""
    if isinstance(ledger, Mapping):
        parts = [str(part) for pair in ledger.items() for part in pair]
    else:
        parts = [str(part) for part in ledger]
    return sorted(" ".join(parts).split())


def parse_ledger_dump(text: str) -> List[str]:
    return ledger_entries(text.split())


def is_ledger_noise(entry: str) -> bool:
    """Version self references and bare names without a directory part."""
    return bool(LEDGER_NOISE_RE.search(entry))


def is_transient(path: str, prefixes: Sequence[str]) -> bool:
    return any(path.startswith(prefix) for prefix in prefixes)


def derive_module_name(path: str, stdlib_prefixes: Sequence[str] = ()) -> str:
    """``Regexp/Common.pm`` -> ``Regexp::Common``."""
    name = path
    for prefix in stdlib_prefixes:
        if prefix in name:
            name = name.replace(prefix, "", 1)
            break
    name = EXTENSION_RE.sub("", name, count=1)
    return name.replace("/", "::")


def classify(
    ledger: Ledger,
    corelist: Optional[CoreModuleIndex] = None,
    config: Optional[DependsConfig] = None,
) -> DependencyReport:
    corelist = corelist if corelist is not None else EmptyCoreList()
    config = config or DependsConfig()

    found: Dict[str, str] = {}
    for lib in ledger_entries(ledger):
        if is_ledger_noise(lib):
            continue
        if is_transient(lib, config.transient_prefixes):
            logger.debug("Ignoring transient path %s", lib)
            continue

        name = derive_module_name(lib, config.stdlib_prefixes)
        if corelist.find_modules(name):
            continue

        # Later paths for the same name win
        found[name] = lib

    entries = [DependencyEntry(name=name, path=found[name]) for name in sorted(found)]
    return DependencyReport(entries=entries)

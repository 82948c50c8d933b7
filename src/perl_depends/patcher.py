"""
Instrument Perl files with the dependency report trailer.

The text transformations are plain functions from one string to a new
string; ``instrument_file`` wraps them with the copy/read/write steps and
turns I/O failures into a skipped ``PatchResult`` so a batch never stops
on one bad file.
"""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .models import DependsConfig, PatchResult
from .snippets import REPORT_MARKER, REPORT_ROUTINE_NAME, end_block, report_call, report_routine

logger = logging.getLogger(__name__)

END_BLOCK_RE = re.compile(r"^END\s*\{(?P<body>.*)\}", re.MULTILINE | re.DOTALL)
INSERT_POINT_RE = re.compile(r"^(?:#.*)?$", re.MULTILINE)
DATA_MARKER_RE = re.compile(r"^__(?:END|DATA)__\s*$", re.MULTILINE)
ROUTINE_DEFINITION_RE = re.compile(rf"^\s*sub\s+(?:main::)?{REPORT_ROUTINE_NAME}\b", re.MULTILINE)


def find_end_block(text: str) -> Optional[re.Match]:
    """Return the first ``END { ... }`` block in the code part of ``text``."""
    return END_BLOCK_RE.search(text, 0, _code_length(text))


def defines_report(text: str) -> bool:
    return bool(ROUTINE_DEFINITION_RE.search(text))


def _code_length(text: str) -> int:
    marker = DATA_MARKER_RE.search(text)
    return marker.start() if marker else len(text)


def _insert_offset(text: str, before: Optional[int] = None) -> int:
    """Offset just past the first comment or blank line of the code part."""
    limit = _code_length(text)
    if before is not None:
        limit = min(limit, before)
    match = INSERT_POINT_RE.search(text, 0, limit)
    # endpos makes ``$`` match at the limit itself; that is not a real line
    if match is None or match.start() >= limit:
        return limit
    line_end = text.find("\n", match.start())
    if line_end < 0:
        return len(text)
    return line_end + 1


def append_trailer(text: str, trailer: str, before: Optional[int] = None) -> str:
    """
    Insert ``trailer`` after the first comment or blank line of ``text``.

    With ``before`` only lines starting ahead of that offset are considered;
    when none qualifies the trailer lands right at ``before``.
    """
    offset = _insert_offset(text, before)
    head, tail = text[:offset], text[offset:]
    if head and not head.endswith("\n"):
        head += "\n"
    if not trailer.endswith("\n"):
        trailer += "\n"
    return head + trailer + tail


def inject_call(text: str) -> str:
    """Make the report call the first statement of the existing END block."""
    match = find_end_block(text)
    if match is None:
        raise ValueError("no END block to inject into")
    body_start = match.start("body")
    return text[:body_start] + report_call() + text[body_start:]


def instrument_source(text: str, config: DependsConfig) -> Tuple[str, str]:
    """
    Return the instrumented text and the action taken.

    Actions: ``appended`` (routine and a new END block added), ``injected``
    (call added to the existing END block) or ``unchanged`` (the END block
    already reports).
    """
    match = find_end_block(text)
    if match is None:
        trailer = report_routine(config) + end_block()
        return append_trailer(text, trailer), "appended"

    if REPORT_MARKER in match.group("body"):
        return text, "unchanged"

    patched = inject_call(text)
    if not defines_report(patched):
        block = find_end_block(patched)
        patched = append_trailer(patched, report_routine(config), before=block.start())
    return patched, "injected"


def instrument_file(target: Path, config: DependsConfig) -> PatchResult:
    target = Path(target)
    destination = config.destination_for(target)
    result = PatchResult(source=target.as_posix(), destination=destination.as_posix())

    try:
        shutil.copyfile(target, destination)
    except OSError as exc:
        logger.debug("Copy %s -> %s failed: %s", target, destination, exc)
        result.error = str(exc)
        return result

    if not destination.is_file():
        logger.debug("Skipping %s: %s was not created", target, destination)
        return result

    try:
        content = _read_text(destination)
    except OSError as exc:
        logger.warning("Cannot read %s: %s", destination, exc)
        result.error = str(exc)
        return result

    patched, action = instrument_source(content, config)

    if patched != content:
        try:
            _write_text(destination, patched)
        except OSError as exc:
            logger.warning("Cannot write %s: %s", destination, exc)
            result.error = str(exc)
            return result

    result.action = action
    logger.info("[%s] %s -> %s", action.upper(), target, destination)
    print(f"{config.perl} {destination.as_posix()}")
    return result


def instrument_files(targets: Iterable[Path], config: DependsConfig) -> List[PatchResult]:
    return [instrument_file(Path(target), config) for target in targets]


def _read_text(path: Path) -> str:
    # surrogateescape keeps non UTF-8 bytes of the target intact on write
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as fh:
        return fh.read()


def _write_text(path: Path, content: str) -> None:
    fh = open(path, "w", encoding="utf-8", errors="surrogateescape", newline="")
    try:
        fh.write(content)
    finally:
        try:
            fh.close()
        except OSError as exc:
            logger.warning("Close failure %s: %s", path, exc)

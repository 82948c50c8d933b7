"""Embedded manual, rendered as plain text, HTML or a man page."""

from __future__ import annotations

import html
import textwrap
from dataclasses import dataclass, field
from typing import List, Tuple

from . import __version__

PROGRAM = "perl-depends"
CONTACT = "Jari Aalto"
LICENSE = "GPL-2+"
URL = "https://github.com/jaalto/project--perl-depends"


@dataclass
class Section:
    title: str
    paragraphs: List[str] = field(default_factory=list)
    verbatim: List[str] = field(default_factory=list)
    items: List[Tuple[str, str]] = field(default_factory=list)


SECTIONS: List[Section] = [
    Section(
        "NAME",
        [f"{PROGRAM} - Roughly find out module dependencies from Perl file(s)"],
    ),
    Section("SYNOPSIS", verbatim=[f"{PROGRAM} [options] FILE [FILE ...]"]),
    Section(
        "DESCRIPTION",
        [
            "Find out roughly which modules a program uses. Perl evaluates "
            "\"use\" statements at compile time and records every loaded "
            "module in %INC. Comparing those modules against the standard "
            "Perl distribution (Module::CoreList) gives a rough list of the "
            "external modules that have to be installed before the program "
            "can be used.",
            "Each FILE is copied to FILE plus an extension and the copy is "
            "instrumented with the dependency checking code. The user then "
            "runs the copy. The program is not run for you because only the "
            "user knows which options trigger harmless behavior, such as "
            "--version, --help or an invalid argument that stops the "
            "program early.",
            "An example of output: the external dependency here is "
            "'Regexp::Common' and the rest can be ignored.",
        ],
        verbatim=[
            "# PERL MODULE DPENDENCY LIST",
            "Regexp::Common                 Regexp/Common.pm",
            "Regexp::Common::CC             Regexp/Common/CC.pm",
        ],
    ),
    Section(
        "OPTIONS",
        items=[
            ("-e, --extension=EXT", "Use extension EXT for instrumented files. The default is .tmp."),
            ("-h, --help", "Print text help."),
            ("--help-html", "Print help in HTML format."),
            ("--help-man", "Print help in manual page man(1) format."),
            ("-v, --verbose [LEVEL]", "Print informational messages. Increase numeric LEVEL for more verbosity. Only a number directly after --verbose is read as LEVEL."),
            ("-V, --version", "Print contact and version information."),
            ("--config FILE", "Read settings from a YAML file."),
            ("--corelist FILE", "Use the module names in FILE as the standard module list."),
            ("--classify DUMP", "Classify an existing %INC dump instead of instrumenting files. Use - for stdin."),
            ("--log-level LEVEL", "Logging level for messages on standard error."),
            ("--log-file FILE", "Also write log messages to FILE."),
        ],
    ),
    Section(
        "EXAMPLES",
        ["Instrument a file, run it to see the results and delete the instrumented script:"],
        verbatim=[
            f"{PROGRAM} file.pl",
            "perl file.pl.tmp <followed by whatever args the program needs>",
            "rm *.tmp",
        ],
    ),
    Section(
        "EXIT STATUS",
        [
            "The exit status of perl-depends is 0 when every file was "
            "instrumented and 1 when a file had to be skipped.",
            "The instrumented program's exit status is 1 if external modules "
            "are displayed and 0 if no external modules are found.",
        ],
    ),
    Section(
        "BUGS AND LIMITATIONS",
        [
            "Module names are matched against the standard list as patterns, "
            "so the report is an approximation that can both hide and show "
            "modules wrongly.",
            "If the target program loads more modules conditionally during "
            "execution, it has to be run for real to detect them.",
        ],
    ),
    Section("SEE ALSO", ["cpan(1), corelist(1)"]),
    Section("AVAILABILITY", [URL]),
    Section("LICENSE", [f"Released under the {LICENSE} license."]),
]


def version_line() -> str:
    return f"{__version__} {CONTACT} {LICENSE} {URL}"


def render_text(sections: List[Section] = SECTIONS) -> str:
    lines: List[str] = []
    for section in sections:
        lines.append(section.title)
        for paragraph in section.paragraphs:
            lines.extend(textwrap.wrap(paragraph, width=72, initial_indent="    ", subsequent_indent="    "))
            lines.append("")
        for option, text in section.items:
            lines.append(f"    {option}")
            lines.extend(textwrap.wrap(text, width=72, initial_indent="        ", subsequent_indent="        "))
            lines.append("")
        if section.verbatim:
            lines.extend(f"        {line}" for line in section.verbatim)
            lines.append("")
        if lines[-1] != "":
            lines.append("")
    return "\n".join(lines)


def render_html(sections: List[Section] = SECTIONS) -> str:
    esc = html.escape
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        f"<head><title>{esc(PROGRAM)}</title></head>",
        "<body>",
    ]
    for section in sections:
        parts.append(f"<h1>{esc(section.title)}</h1>")
        parts.extend(f"<p>{esc(paragraph)}</p>" for paragraph in section.paragraphs)
        if section.items:
            parts.append("<dl>")
            for option, text in section.items:
                parts.append(f"<dt><strong>{esc(option)}</strong></dt>")
                parts.append(f"<dd><p>{esc(text)}</p></dd>")
            parts.append("</dl>")
        if section.verbatim:
            parts.append("<pre>" + esc("\n".join(section.verbatim)) + "</pre>")
    parts.extend(["</body>", "</html>"])
    return "\n".join(parts) + "\n"


def _roff(text: str) -> str:
    text = text.replace("\\", "\\e").replace("-", "\\-")
    # A leading dot or quote would be read as a request
    if text.startswith((".", "'")):
        text = "\\&" + text
    return text


def render_man(sections: List[Section] = SECTIONS) -> str:
    lines = [f'.TH {PROGRAM.upper()} 1 "" "{PROGRAM} {__version__}" "User Commands"']
    for section in sections:
        lines.append(f".SH {section.title}")
        for paragraph in section.paragraphs:
            lines.append(".PP")
            lines.append(_roff(paragraph))
        for option, text in section.items:
            lines.append(".TP")
            lines.append(f"\\fB{_roff(option)}\\fR")
            lines.append(_roff(text))
        if section.verbatim:
            lines.append(".PP")
            lines.append(".nf")
            lines.extend(_roff(line) for line in section.verbatim)
            lines.append(".fi")
    return "\n".join(lines) + "\n"

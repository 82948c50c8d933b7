"""
Perl source injected into instrumented files.

The routine walks %INC at program exit, turns every loaded path into a
``Foo::Bar`` name and prints the ones Module::CoreList does not know about.
It mirrors ``perl_depends.reporter`` so both classify the same way.
"""

from __future__ import annotations

from typing import Iterable

from .models import REPORT_HEADER, DependsConfig

REPORT_ROUTINE_NAME = "__print_depends"

# Qualified so the call resolves whatever package the END block sits in
REPORT_ROUTINE = f"main::{REPORT_ROUTINE_NAME}"

# Matches both the definition and any call site.
REPORT_MARKER = "print_depends"

_ROUTINE_TEMPLATE = r"""
# ****************************************************************************
#
#   Report modules loaded from outside the standard Perl distribution.
#   Paths are converted to '::' notation; the result is an approximation
#   to be reviewed by the reader.
#
# ****************************************************************************

sub @ROUTINE@
{
    my @files = sort grep !/5.\d\d|^[\w.]+$/, split ' ', join ' ', %INC;

    my $corelist = eval { require Module::CoreList; 1 };

    my @transient = ( @TRANSIENT@ );
    my @stdlib    = ( @STDLIB@ );
    my %hash;

    LIB:
    for my $lib ( @files )
    {
        for my $prefix ( @transient )
        {
            next LIB if index($lib, $prefix) == 0;
        }

        my $name = $lib;

        for my $prefix ( @stdlib )
        {
            my $pos = index $name, $prefix;
            next if $pos < 0;
            substr($name, $pos, length $prefix) = '';
            last;
        }

        $name =~ s/\..*//;              # *.pm
        $name =~ s,/,::,g;              # Regexp/Common => Regexp::Common

        if ( $corelist )
        {
            my $re = eval { qr/$name/ } || qr/\Q$name\E/;
            my @core = Module::CoreList->find_modules($re);
            next if @core;
        }

        $hash{$name} = $lib;
    }

    my $status = 0;

    for my $key ( sort keys %hash )
    {
        print "@HEADER@\n" unless $status;
        printf "%-30s %s\n", $key, $hash{$key};
        $status = 1;
    }

    $? = $status;
}
"""

_END_TEMPLATE = """
END
{
    @ROUTINE@();
}
"""


def perl_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def perl_list(values: Iterable[str]) -> str:
    return ", ".join(perl_string(v) for v in values)


def report_routine(config: DependsConfig) -> str:
    """Return the Perl definition of the report routine for ``config``."""
    return (
        _ROUTINE_TEMPLATE.replace("@ROUTINE@", REPORT_ROUTINE)
        .replace("@TRANSIENT@", perl_list(config.transient_prefixes))
        .replace("@STDLIB@", perl_list(config.stdlib_prefixes))
        .replace("@HEADER@", REPORT_HEADER)
    )


def end_block() -> str:
    return _END_TEMPLATE.replace("@ROUTINE@", REPORT_ROUTINE)


def report_call() -> str:
    return f"\n    {REPORT_ROUTINE}();\n"

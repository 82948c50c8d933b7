"""
perl-depends: rough indicator of Perl module dependencies.

Instruments copies of Perl scripts with an END block that lists, when the
copy is run, the loaded modules that are not part of the standard Perl
distribution.
"""

__version__ = "2016.1029.0922"

from .models import DependencyEntry, DependencyReport, DependsConfig, PatchResult

__all__ = ["DependencyEntry", "DependencyReport", "DependsConfig", "PatchResult"]

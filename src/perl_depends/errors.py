class DependsError(Exception):
    """Base class for perl-depends errors."""


class CorelistUnavailable(DependsError):
    """The standard-library reference list could not be loaded."""

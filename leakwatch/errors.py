# Exception hierarchy for leakwatch.
#
# Parse failures are not exceptions: the parser adapter returns them as values
# (see leakwatch.parser.ParseFailure) so analysis can degrade instead of crash.


class LeakwatchError(Exception):
    """Base class for all leakwatch errors."""


class ConfigurationError(LeakwatchError):
    """
    A rule registry or scanner configuration is malformed.

    Raised while building a registry (duplicate ids, bad regex, non-Rule
    entries), never during an analysis call.
    """

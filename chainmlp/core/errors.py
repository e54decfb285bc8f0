"""Exception types raised by chainmlp."""

from __future__ import annotations


class ShapeMismatch(ValueError):
    """Input, target or layer widths disagree."""


class FormatError(ValueError):
    """A weight string or data-set text could not be parsed."""


class ConfigurationError(ValueError):
    """A run configuration is missing sections or names unknown options."""


class ConfigurationWarning(UserWarning):
    """A requested behaviour cannot apply to the supplied data sets."""


__all__ = ["ShapeMismatch", "FormatError", "ConfigurationError", "ConfigurationWarning"]

"""Fieldcheck exception hierarchy.

Validation failures are never raised by the checks themselves; they are
recorded on a ``Validator``. The types here cover the other tier: misuse
of the API by calling code, which should fail loudly.
"""


class FieldcheckError(Exception):
    """Base for all fieldcheck-specific errors."""


class ConfigurationError(FieldcheckError):
    """Raised when an optional dependency needed for a feature is missing."""


class ContractError(FieldcheckError, TypeError):
    """Raised when a check is called in a way that can never be valid.

    Examples: passing a value of an unsupported type to ``required``,
    or calling ``file_size`` without any bound. These are bugs in the
    calling code, not bad input data.
    """


class AddressError(FieldcheckError, ValueError):
    """Raised when text cannot be parsed as an email address."""

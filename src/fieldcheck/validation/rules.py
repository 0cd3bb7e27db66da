"""Built-in rules for ``validate()``.

Each rule is a callable with the signature::

    def rule(v: Validator, field: str, value: Any) -> None:
        '''Run one check of ``v`` against value.'''

Plain rules wrap a ``Validator`` check directly. Parameterized rules are
factory functions that return a rule::

    def length(min_length: int, max_length: int = 0) -> Rule:
        def check(v: Validator, field: str, value: Any) -> None:
            v.length(field, value, min_length, max_length)
        return check

Custom rules follow the same protocol: any callable matching
``(Validator, str, Any) -> None`` works with ``validate()``.
"""

from collections.abc import Callable
from functools import partial
from typing import Any

from fieldcheck.validation.files import ImageDimension
from fieldcheck.validation.validator import Validator

# Type alias for a rule function
type Rule = Callable[[Validator, str, Any], None]


def with_message(rule: Rule, message: str) -> Rule:
    """Bind a replacement message onto one of the plain rules below."""
    return partial(rule, message=message)


def _count(v: Validator, field: str) -> int:
    return len(v.errors.get(field, ()))


def _no_file(value: Any) -> bool:
    return value is None or value == ""


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def required(v: Validator, field: str, value: Any, *, message: str | None = None) -> None:
    """Field must be present and non-empty."""
    v.required(field, value, message=message)


# ---------------------------------------------------------------------------
# Length and range
# ---------------------------------------------------------------------------


def length(min_length: int, max_length: int = 0, *, message: str | None = None) -> Rule:
    """String must be *min_length* to *max_length* characters (0 = unbounded)."""

    def check(v: Validator, field: str, value: Any) -> None:
        v.length(field, value, min_length, max_length, message=message)

    return check


def value_range(minimum: int, maximum: int = 0, *, message: str | None = None) -> Rule:
    """Whole number between *minimum* and *maximum* (0 = unbounded).

    String values are parsed first; a value that is not a whole number
    gets the integer message only.
    """

    def check(v: Validator, field: str, value: Any) -> None:
        if isinstance(value, str):
            if value == "":
                return
            before = _count(v, field)
            number = v.integer(field, value)
            if _count(v, field) > before:
                return
        else:
            number = value
        v.range(field, number, minimum, maximum, message=message)

    return check


# ---------------------------------------------------------------------------
# Choice
# ---------------------------------------------------------------------------


def one_of(*choices: str, message: str | None = None) -> Rule:
    """Value must be one of the given choices, ignoring case."""

    def check(v: Validator, field: str, value: Any) -> None:
        v.include(field, value, choices, message=message)

    return check


def none_of(*choices: str, message: str | None = None) -> Rule:
    """Value must not be any of the given choices, ignoring case."""

    def check(v: Validator, field: str, value: Any) -> None:
        v.exclude(field, value, choices, message=message)

    return check


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------


def domain(v: Validator, field: str, value: Any, *, message: str | None = None) -> None:
    v.domain(field, value, message=message)


def url(v: Validator, field: str, value: Any, *, message: str | None = None) -> None:
    v.url(field, value, message=message)


def email(v: Validator, field: str, value: Any, *, message: str | None = None) -> None:
    v.email(field, value, message=message)


def ipv4(v: Validator, field: str, value: Any, *, message: str | None = None) -> None:
    v.ipv4(field, value, message=message)


def hex_color(v: Validator, field: str, value: Any, *, message: str | None = None) -> None:
    v.hex_color(field, value, message=message)


def phone(v: Validator, field: str, value: Any, *, message: str | None = None) -> None:
    v.phone(field, value, message=message)


def date(layout: str, *, message: str | None = None) -> Rule:
    """Value must be a date in the ``strptime`` *layout*."""

    def check(v: Validator, field: str, value: Any) -> None:
        v.date(field, value, layout, message=message)

    return check


# ---------------------------------------------------------------------------
# Type coercion
# ---------------------------------------------------------------------------


def integer(v: Validator, field: str, value: Any, *, message: str | None = None) -> None:
    v.integer(field, value, message=message)


def boolean(v: Validator, field: str, value: Any, *, message: str | None = None) -> None:
    v.boolean(field, value, message=message)


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def mime_type(mime_types: str, *, message: str | None = None) -> Rule:
    """Upload must be of one of the comma-separated *mime_types*."""

    def check(v: Validator, field: str, value: Any) -> None:
        if _no_file(value):
            return
        v.file_mime_type(field, value, mime_types, message=message)

    return check


def file_size(
    min_size: int | None = None,
    max_size: int | None = None,
    *,
    message: str | None = None,
) -> Rule:
    """Upload size in bytes must be within the bounds; ``None`` disables one."""

    def check(v: Validator, field: str, value: Any) -> None:
        if _no_file(value):
            return
        v.file_size(field, value, min_size, max_size, message=message)

    return check


def image(formats: str = "", *, message: str | None = None) -> Rule:
    """Upload must be a JPEG, PNG or GIF image, optionally narrowed by *formats*."""

    def check(v: Validator, field: str, value: Any) -> None:
        if _no_file(value):
            return
        v.is_image(field, value, formats, message=message)

    return check


def image_dimensions(
    min_dimension: ImageDimension | None = None,
    max_dimension: ImageDimension | None = None,
    *,
    message: str | None = None,
) -> Rule:
    """Image width and height must be within the bounds."""

    def check(v: Validator, field: str, value: Any) -> None:
        if _no_file(value):
            return
        v.image_dimensions(field, value, min_dimension, max_dimension, message=message)

    return check

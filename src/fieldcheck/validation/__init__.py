"""Request validation — field-keyed error aggregate and composable rules.

Two ways in. Call checks directly on a ``Validator``::

    from fieldcheck.validation import Validator

    v = Validator()
    v.required("title", form.get("title", ""))
    v.length("title", form.get("title", ""), 0, 200)
    v.email("email", form.get("email", ""))
    return v.error_or_none()

Or describe the fields with rule lists and let ``validate()`` run them::

    from fieldcheck.validation import validate, required, length, email

    async def create_post(request):
        form = await parse_form_data(body, content_type)
        result = validate(form, {
            "title": [required, length(0, 200)],
            "body": [required],
            "email": [required, email],
        })
        if not result:
            raise result.errors
        # result.data has the values of fields that passed
"""

from collections.abc import Mapping
from typing import Any

from fieldcheck.config import DEFAULT_MESSAGES, Messages
from fieldcheck.validation.files import ImageDimension
from fieldcheck.validation.result import ValidationResult
from fieldcheck.validation.rules import (
    Rule,
    boolean,
    date,
    domain,
    email,
    file_size,
    hex_color,
    image,
    image_dimensions,
    integer,
    ipv4,
    length,
    mime_type,
    none_of,
    one_of,
    phone,
    required,
    url,
    value_range,
    with_message,
)
from fieldcheck.validation.validator import Validator, errors_equal, new, valid_domain

__all__ = [
    "ImageDimension",
    "Rule",
    "ValidationResult",
    "Validator",
    "boolean",
    "date",
    "domain",
    "email",
    "errors_equal",
    "file_size",
    "hex_color",
    "image",
    "image_dimensions",
    "integer",
    "ipv4",
    "length",
    "mime_type",
    "new",
    "none_of",
    "one_of",
    "phone",
    "required",
    "url",
    "valid_domain",
    "validate",
    "value_range",
    "with_message",
]


def validate(
    data: Mapping[str, Any],
    rules: dict[str, list[Rule]],
    *,
    messages: Messages = DEFAULT_MESSAGES,
) -> ValidationResult:
    """Validate data against a set of rules.

    Args:
        data: Any mapping of field names to values: ``FormData``, or a
            plain ``dict``. When the mapping has a ``files`` attribute
            (as ``FormData`` does), uploaded files are looked up there.
        rules: A dict mapping field names to lists of rules. Each rule
            records its failure on the ``Validator`` it is given.
        messages: Message templates for the ``Validator``.

    Returns:
        A ``ValidationResult`` with ``.data`` (values of passing fields)
        and ``.errors`` (the ``Validator``).

    Example::

        result = validate(form, {
            "title": [required, length(0, 200)],
            "body": [required, length(10)],
        })
        if not result:
            # result.errors.errors == {"body": ["must be longer than 10 characters"]}
            ...
    """
    errors = Validator(messages)
    cleaned: dict[str, Any] = {}
    files: Mapping[str, Any] = getattr(data, "files", None) or {}

    for field_name, field_rules in rules.items():
        if field_name in files:
            value = files[field_name]
        else:
            value = data.get(field_name) or ""

        before = _error_count(errors, field_name)
        for rule in field_rules:
            count = _error_count(errors, field_name)
            rule(errors, field_name, value)
            # A failed presence check ends this field's rules
            if getattr(rule, "func", rule) is required and _error_count(errors, field_name) > count:
                break

        if _error_count(errors, field_name) == before:
            cleaned[field_name] = value

    return ValidationResult(data=cleaned, errors=errors)


def _error_count(v: Validator, field: str) -> int:
    return len(v.errors.get(field, ()))

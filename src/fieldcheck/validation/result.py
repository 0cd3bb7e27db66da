"""Outcome of ``validate()``."""

from dataclasses import dataclass
from typing import Any

from fieldcheck.validation.validator import Validator


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Values that passed, plus the ``Validator`` holding every failure.

    ``data`` maps each field whose rules all passed to its raw value
    (a string, or an ``UploadFile`` for file fields). Fields with at
    least one message are left out of it.

    Truthiness follows validity::

        result = validate(form, rules)
        if not result:
            raise result.errors
        save(result.data)
    """

    data: dict[str, Any]
    errors: Validator

    @property
    def is_valid(self) -> bool:
        return not self.errors.has_errors()

    def __bool__(self) -> bool:
        return self.is_valid

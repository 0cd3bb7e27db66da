"""The ``Validator`` error aggregate and the scalar checks.

A ``Validator`` maps field keys to the ordered list of messages recorded
for them. Checks are methods: each one inspects a single value and
either leaves the aggregate untouched or appends exactly one message
under the given field.

Usage::

    v = Validator()
    v.required("name", form.get("name", ""))
    v.email("email", form.get("email", ""))
    user_id = v.integer("id", form.get("id", ""))
    if v.has_errors():
        raise v

Empty values ("", 0, None) are valid for every check except
``required``; combine the two to make a field mandatory. Every check
accepts a keyword-only ``message`` that replaces the default wording.
"""

from __future__ import annotations

import ipaddress
import json
import re
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import Any
from urllib.parse import SplitResult, urlsplit

from fieldcheck.address import Address, parse_address
from fieldcheck.config import DEFAULT_MESSAGES, Messages
from fieldcheck.errors import AddressError, FieldcheckError
from fieldcheck.validation.files import FileChecks
from fieldcheck.validation.required import is_empty

# Besides letters of any script, labels may only hold ASCII digits and hyphens
_LABEL_EXTRA = frozenset("0123456789-")
_MAX_LABEL = 63
_HEX_COLOR_RE = re.compile(r"#(?:[0-9a-f]{3}|[0-9a-f]{6})", re.IGNORECASE)
# Shape only; no per-country numbering plans
_PHONE_RE = re.compile(r"[0-9+\-() .]{5,20}")
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_TRUE = frozenset({"1", "y", "yes", "t", "true"})
_FALSE = frozenset({"0", "n", "no", "f", "false"})

type Sanitizer = Callable[[str], str]


def valid_domain(value: str) -> bool:
    """Return True if *value* has at least two well-formed labels."""
    labels = value.split(".")
    return len(labels) >= 2 and all(_valid_label(label) for label in labels)


def _valid_label(label: str) -> bool:
    if not 1 <= len(label) <= _MAX_LABEL:
        return False
    return all(char.isalpha() or char in _LABEL_EXTRA for char in label)


class Validator(FileChecks, FieldcheckError):
    """Field-keyed collection of validation messages.

    A ``Validator`` is also an exception: return it, or ``raise`` it,
    to report a failed validation. ``status`` is the HTTP status that
    request handlers should answer with.

    Not safe for concurrent writers; use one instance per request.
    """

    status: int = 400

    def __init__(self, messages: Messages = DEFAULT_MESSAGES) -> None:
        super().__init__()
        self.errors: dict[str, list[str]] = {}
        self.messages = messages

    # -- Aggregate ---------------------------------------------------------

    def append(self, field: str, message: str, *args: object) -> None:
        """Record *message* for *field*; ``%``-formatted when *args* are given."""
        if args:
            message = message % args
        self.errors.setdefault(field, []).append(message)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def error_or_none(self) -> Validator | None:
        """Return ``self`` if any errors were recorded, else ``None``.

        Shortens the common ending of a validation function::

            return v.error_or_none()
        """
        if self.has_errors():
            return self
        return None

    def merge(self, other: Validator) -> None:
        """Append every message of *other* under the same keys."""
        for field, messages in other.errors.items():
            self.errors.setdefault(field, []).extend(messages)

    def sub(self, field: str, key: str | int | None, err: BaseException | None) -> None:
        """Fold the outcome of a nested validation into this one.

        Keys from a nested ``Validator`` are added as ``field.sub`` or,
        when *key* is given, ``field[key].sub``::

            v.sub("settings", None, settings.validate())
            for i, address in enumerate(customer.addresses):
                v.sub("addresses", i, address.validate())

        Any other exception is recorded as its text under the prefix
        itself, without a sub key.
        """
        if err is None:
            return

        prefix = field if key is None or key == "" else f"{field}[{key}]"

        if not isinstance(err, Validator):
            self.append(prefix, str(err))
            return

        for sub_field, messages in err.errors.items():
            self.errors.setdefault(f"{prefix}.{sub_field}", []).extend(messages)

    def to_dict(self) -> dict[str, dict[str, list[str]]]:
        return {"errors": {field: list(messages) for field, messages in self.errors.items()}}

    def to_json(self) -> str:
        """Serialize as ``{"errors": {field: [messages]}}``."""
        return json.dumps(self.to_dict())

    def __str__(self) -> str:
        if not self.has_errors():
            return "<no errors>"
        return "".join(
            f"{field}: {', '.join(self.errors[field])}.\n" for field in sorted(self.errors)
        )

    def __repr__(self) -> str:
        return f"Validator({self.errors!r})"

    # -- Presence ----------------------------------------------------------

    def required(self, field: str, value: Any, *, message: str | None = None) -> None:
        """Value must not be the empty form of its type.

        Supported: ``str`` (blank after strip), ``bool``, ``int``,
        ``float``, ``None``, ``bytes``, sequences and sets (empty, or only
        ``None``/``""`` entries), ``Address``, ``AddressList``,
        ``UploadFile`` and binary streams.

        Raises:
            ContractError: For any other type of *value*.
        """
        if is_empty(value):
            self.append(field, message or self.messages.required)

    # -- Length and range --------------------------------------------------

    def length(
        self,
        field: str,
        value: str,
        min_length: int,
        max_length: int = 0,
        *,
        message: str | None = None,
    ) -> None:
        """Length in characters must be within the bounds; 0 means no maximum."""
        count = len(value)
        if count < min_length:
            self.append(field, message or self.messages.length_longer.format(min=min_length))
        elif max_length > 0 and count > max_length:
            self.append(field, message or self.messages.length_shorter.format(max=max_length))

    def range(
        self,
        field: str,
        value: int,
        minimum: int,
        maximum: int = 0,
        *,
        message: str | None = None,
    ) -> None:
        """Integer must be within the bounds; 0 means no maximum."""
        if value < minimum:
            self.append(field, message or self.messages.range_higher.format(min=minimum))
        elif maximum > 0 and value > maximum:
            self.append(field, message or self.messages.range_lower.format(max=maximum))

    # -- Membership --------------------------------------------------------

    def include(
        self,
        field: str,
        value: str,
        choices: Sequence[str] | None,
        *,
        sanitize: Iterable[Sanitizer] | None = None,
        message: str | None = None,
    ) -> None:
        """Value must match one of *choices*, ignoring case.

        The value is stripped before comparing; pass *sanitize* to run
        other functions on it instead. An empty *choices* or an empty
        value accepts anything.
        """
        if not choices or value == "":
            return
        wanted = _sanitized(value, sanitize)
        if any(choice.casefold() == wanted for choice in choices):
            return
        self.append(field, message or self.messages.include.format(choices=", ".join(choices)))

    def exclude(
        self,
        field: str,
        value: str,
        choices: Sequence[str] | None,
        *,
        sanitize: Iterable[Sanitizer] | None = None,
        message: str | None = None,
    ) -> None:
        """Value must not match any of *choices*, ignoring case."""
        if not choices or value == "":
            return
        wanted = _sanitized(value, sanitize)
        for choice in choices:
            if choice.casefold() == wanted:
                self.append(field, message or self.messages.exclude.format(value=choice))
                return

    def include_int(
        self,
        field: str,
        value: int,
        choices: Sequence[int] | None,
        *,
        message: str | None = None,
    ) -> None:
        """Integer must be one of *choices*. An empty *choices* accepts anything."""
        if not choices or value in choices:
            return
        joined = ", ".join(str(choice) for choice in choices)
        self.append(field, message or self.messages.include.format(choices=joined))

    def exclude_int(
        self,
        field: str,
        value: int,
        choices: Sequence[int] | None,
        *,
        message: str | None = None,
    ) -> None:
        """Integer must not be one of *choices*."""
        if choices and value in choices:
            self.append(field, message or self.messages.exclude.format(value=value))

    # -- Format ------------------------------------------------------------

    def domain(self, field: str, value: str, *, message: str | None = None) -> None:
        """Value must be a domain name with at least two labels.

        ``example.com`` and ``me.localhost`` pass, ``localhost`` does
        not. Internationalized names pass both as native script and as
        punycode. Labels are limited to 63 characters, not bytes.
        """
        if value == "":
            return
        if not valid_domain(value):
            self.append(field, message or self.messages.domain)

    def url(self, field: str, value: str, *, message: str | None = None) -> SplitResult | None:
        """Value must be a URL whose host passes the ``domain`` check.

        ``http`` is assumed when the scheme is missing. Returns the parsed
        URL, or ``None`` when empty or invalid.
        """
        if value == "":
            return None

        try:
            parts = urlsplit(value)
            if not parts.scheme:
                if parts.netloc:
                    parts = parts._replace(scheme="http")
                else:
                    parts = urlsplit(f"http://{value}")
            host = parts.hostname or ""
            _ = parts.port
        except ValueError as exc:
            self.append(field, message or f"{self.messages.url}: {exc}")
            return None

        if not host or not valid_domain(host):
            self.append(field, message or self.messages.url)
            return None
        return parts

    def email(self, field: str, value: str, *, message: str | None = None) -> Address | None:
        """Value must be an email address, optionally with a display name.

        Returns the parsed address, or ``None`` when empty or invalid.
        """
        if value == "":
            return None
        try:
            return parse_address(value)
        except AddressError:
            self.append(field, message or self.messages.email)
            return None

    def ipv4(
        self, field: str, value: str, *, message: str | None = None
    ) -> ipaddress.IPv4Address | None:
        """Value must be a dotted-quad IPv4 address (no CIDR suffix).

        IPv4-mapped IPv6 literals such as ``::ffff:10.0.0.1`` are accepted
        and returned in their IPv4 form.
        """
        if value == "":
            return None
        try:
            ip = ipaddress.ip_address(value)
        except ValueError:
            ip = None
        if isinstance(ip, ipaddress.IPv6Address):
            ip = ip.ipv4_mapped
        if ip is None:
            self.append(field, message or self.messages.ipv4)
        return ip

    def hex_color(self, field: str, value: str, *, message: str | None = None) -> None:
        """Value must be a hex color triplet such as ``#fff`` or ``#3a6ea5``."""
        if value == "":
            return
        if _HEX_COLOR_RE.fullmatch(value) is None:
            self.append(field, message or self.messages.hex_color)

    def phone(self, field: str, value: str, *, message: str | None = None) -> None:
        """Value must look like a phone number.

        Only checks for 5 to 20 of ``0-9 + - ( ) . `` and space.
        """
        if value == "":
            return
        if _PHONE_RE.fullmatch(value) is None:
            self.append(field, message or self.messages.phone)

    def date(
        self, field: str, value: str, layout: str, *, message: str | None = None
    ) -> datetime | None:
        """Value must parse with ``datetime.strptime`` using *layout*."""
        if value == "":
            return None
        try:
            return datetime.strptime(value, layout)
        except ValueError:
            self.append(field, message or self.messages.date.format(layout=layout))
            return None

    # -- Type coercion -----------------------------------------------------

    def integer(self, field: str, value: str, *, message: str | None = None) -> int:
        """Value must be a base-10, 64-bit whole number.

        Returns the parsed number, or 0 when empty or invalid::

            user_id = v.integer("id", request.path_params["id"])
        """
        if value == "":
            return 0
        text = value.strip()
        if _INTEGER_RE.fullmatch(text) is not None:
            number = int(text)
            if _INT64_MIN <= number <= _INT64_MAX:
                return number
        self.append(field, message or self.messages.integer)
        return 0

    def boolean(self, field: str, value: str, *, message: str | None = None) -> bool:
        """Value must be one of 1/y/yes/t/true or 0/n/no/f/false, any case."""
        if value == "":
            return False
        lowered = value.lower()
        if lowered in _TRUE:
            return True
        if lowered not in _FALSE:
            self.append(field, message or self.messages.boolean)
        return False


def new(messages: Messages = DEFAULT_MESSAGES) -> Validator:
    """Return an empty ``Validator``."""
    return Validator(messages)


def errors_equal(a: Validator | None, b: Validator | None) -> bool:
    """Compare two aggregates by content, treating ``None`` as having no errors.

    Message order within a key is ignored, repeats are not. ``==`` on
    ``Validator`` itself keeps exception identity semantics.
    """
    return _normalized(a.errors if a is not None else {}) == _normalized(
        b.errors if b is not None else {}
    )


def _normalized(errors: dict[str, list[str]]) -> dict[str, list[str]]:
    return {field: sorted(messages) for field, messages in errors.items() if messages}


def _sanitized(value: str, sanitize: Iterable[Sanitizer] | None) -> str:
    if sanitize is None:
        return value.strip().casefold()
    for func in sanitize:
        value = func(value)
    return value.casefold()

"""Emptiness rules for ``Validator.required``.

A closed set of overloads: each supported value shape registers how it
decides "empty". Anything without a registration is a caller bug and
raises ``ContractError`` instead of silently recording a field error.
"""

import io
import logging
from functools import singledispatch
from typing import Any

from fieldcheck.address import Address, AddressList
from fieldcheck.errors import ContractError
from fieldcheck.http.forms import UploadFile

logger = logging.getLogger("fieldcheck.required")

# Bytes read from a stream to decide it is not empty
_PROBE_SIZE = 10


@singledispatch
def is_empty(value: Any) -> bool:
    """Return True if *value* is the empty form of its type."""
    msg = f"required: not a supported type: {type(value).__name__}"
    raise ContractError(msg)


@is_empty.register(type(None))
def _(value: None) -> bool:
    return True


@is_empty.register
def _(value: str) -> bool:
    return not value.strip()


@is_empty.register
def _(value: bool) -> bool:
    return not value


@is_empty.register(int)
@is_empty.register(float)
def _(value: int | float) -> bool:
    return value == 0


@is_empty.register(bytes)
@is_empty.register(bytearray)
def _(value: bytes | bytearray) -> bool:
    return len(value) == 0


@is_empty.register
def _(value: Address) -> bool:
    return not value.address


@is_empty.register(list)
@is_empty.register(tuple)
@is_empty.register(set)
@is_empty.register(frozenset)
def _(value: list | tuple | set | frozenset) -> bool:
    # " " counts as an entry; only None and "" do not
    return all(item is None or item == "" for item in value)


# AddressList is a list subclass; registered for clarity of intent
@is_empty.register
def _(value: AddressList) -> bool:
    return len(value) == 0


@is_empty.register
def _(value: UploadFile) -> bool:
    if value.size <= 0:
        return True
    try:
        with value.open() as fh:
            return not fh.read(_PROBE_SIZE)
    except OSError:
        logger.debug("required: cannot open upload %r", value.filename, exc_info=True)
        return True


@is_empty.register
def _(value: io.IOBase) -> bool:
    try:
        position = value.tell() if value.seekable() else None
        chunk = value.read(_PROBE_SIZE)
        if position is not None:
            value.seek(position)
    except (OSError, ValueError):
        logger.debug("required: cannot read stream %r", value, exc_info=True)
        return True
    return not chunk

"""Email address values and their parsers.

``Address`` is the parsed form of a single mailbox such as
``"Martin <martin@example.com>"``; ``AddressList`` holds several.

Syntax checking of the addr-spec is delegated to ``email-validator``
(deliverability is never checked, so no DNS lookups happen). Display
names are split off with the stdlib ``email.utils`` helpers.
"""

from dataclasses import dataclass
from email.utils import formataddr, getaddresses, parseaddr

from email_validator import EmailNotValidError, validate_email

from fieldcheck.errors import AddressError


@dataclass(frozen=True, slots=True)
class Address:
    """A single mailbox: optional display name plus the address."""

    address: str = ""
    name: str = ""

    def __str__(self) -> str:
        if self.name:
            return formataddr((self.name, self.address))
        return self.address


class AddressList(list[Address]):
    """An ordered list of ``Address`` values."""

    def __str__(self) -> str:
        return ", ".join(str(a) for a in self)


def parse_address(text: str) -> Address:
    """Parse a single mailbox.

    Raises:
        AddressError: If *text* is not a syntactically valid address.
    """
    name, addr = parseaddr(text)
    return Address(address=_check_addr_spec(addr, text), name=name)


def parse_address_list(text: str) -> AddressList:
    """Parse a comma-separated list of mailboxes.

    Blank entries are skipped.

    Raises:
        AddressError: If any entry is not a syntactically valid address.
    """
    result = AddressList()
    for name, addr in getaddresses([text]):
        if not name and not addr:
            continue
        result.append(Address(address=_check_addr_spec(addr, text), name=name))
    if not result and text.strip():
        msg = f"Not an address list: {text!r}"
        raise AddressError(msg)
    return result


def _check_addr_spec(addr: str, original: str) -> str:
    addr = addr.strip()
    try:
        validate_email(addr, check_deliverability=False)
    except EmailNotValidError as exc:
        msg = f"Not an email address: {original!r} ({exc})"
        raise AddressError(msg) from exc
    return addr

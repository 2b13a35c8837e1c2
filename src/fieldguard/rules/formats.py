"""Well-known string formats: email, url, ip, credit card, phone number.

Email addresses are checked with ``email-validator`` (syntax only, no DNS
lookups) and phone numbers with ``phonenumbers``. Each ``apply`` returns ``None`` for a valid
value and raises ``Error`` otherwise.
"""

import ipaddress
import re
from enum import Enum
from urllib.parse import urlsplit

import phonenumbers
from email_validator import EmailNotValidError, validate_email
from phonenumbers import NumberParseException

from ..errors import Error

_DIGITS = re.compile(r"[0-9]+")

_PHONE_PARSE_ERRORS = {
    NumberParseException.INVALID_COUNTRY_CODE: "invalid country code",
    NumberParseException.NOT_A_NUMBER: "not a number",
    NumberParseException.TOO_SHORT_AFTER_IDD: "too short after the international prefix",
    NumberParseException.TOO_SHORT_NSN: "too short",
    NumberParseException.TOO_LONG: "too long",
}


class IpKind(str, Enum):
    """Address families accepted by the ``ip`` rules."""
    ANY = "any"
    V4 = "v4"
    V6 = "v6"


def apply_email(value: str, args: tuple = ()) -> None:
    try:
        validate_email(value, check_deliverability=False, allow_domain_literal=True)
    except EmailNotValidError as e:
        raise Error(f"not a valid email: {e}")


def apply_url(value: str, args: tuple = ()) -> None:
    try:
        parts = urlsplit(value)
    except ValueError as e:
        raise Error(f"not a valid url: {e}")
    if not parts.scheme:
        raise Error("not a valid url: relative URL without a base")
    if not parts.netloc and parts.scheme in ("http", "https", "ftp", "ws", "wss"):
        raise Error("not a valid url: empty host")
    if any(char.isspace() for char in value):
        raise Error("not a valid url: invalid character")


def apply_ip(value: str, args: tuple) -> None:
    (kind,) = args
    try:
        address = ipaddress.ip_address(value)
    except ValueError:
        address = None
    if kind == IpKind.V4:
        if not isinstance(address, ipaddress.IPv4Address):
            raise Error("not a valid IPv4 address")
    elif kind == IpKind.V6:
        if not isinstance(address, ipaddress.IPv6Address):
            raise Error("not a valid IPv6 address")
    elif address is None:
        raise Error("not a valid IP address")


def apply_credit_card(value: str, args: tuple = ()) -> None:
    digits = value.replace(" ", "").replace("-", "")
    if not _DIGITS.fullmatch(digits):
        raise Error("not a valid credit card number: invalid format")
    if not 12 <= len(digits) <= 19:
        raise Error("not a valid credit card number: invalid length")
    total = 0
    for index, char in enumerate(reversed(digits)):
        digit = int(char)
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    if total % 10 != 0:
        raise Error("not a valid credit card number: invalid luhn checksum")


def apply_phone_number(value: str, args: tuple = ()) -> None:
    """Numbers are parsed without a default region, so they need a `+` prefix."""
    try:
        number = phonenumbers.parse(value, None)
    except NumberParseException as e:
        raise Error(f"not a valid phone number: {_PHONE_PARSE_ERRORS.get(e.error_type, e)}")
    if not phonenumbers.is_valid_number(number):
        raise Error("not a valid phone number: invalid number")

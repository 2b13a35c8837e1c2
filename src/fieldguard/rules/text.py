"""Character-class and substring rules for text values."""

from ..errors import Error


def apply_ascii(value: str, args: tuple = ()) -> None:
    if not value.isascii():
        raise Error("not ascii")


def apply_alphanumeric(value: str, args: tuple = ()) -> None:
    if not all(char.isalnum() for char in value):
        raise Error("not alphanumeric")


def apply_contains(value: str, args: tuple) -> None:
    (pattern,) = args
    if pattern not in value:
        raise Error(f'does not contain "{pattern}"')


def apply_prefix(value: str, args: tuple) -> None:
    (pattern,) = args
    if not value.startswith(pattern):
        raise Error(f'value does not begin with "{pattern}"')


def apply_suffix(value: str, args: tuple) -> None:
    (pattern,) = args
    if not value.endswith(pattern):
        raise Error(f'does not end with "{pattern}"')

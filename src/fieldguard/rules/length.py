"""Length rule for anything that supports ``len()``."""

import sys

from ..errors import Error

# Largest length a Python container can report.
MAX_LENGTH = sys.maxsize


def apply(value, args: tuple) -> None:
    minimum, maximum = args
    length = len(value)
    if length < minimum:
        raise Error(f"length is lower than {minimum}")
    if length > maximum:
        raise Error(f"length is greater than {maximum}")

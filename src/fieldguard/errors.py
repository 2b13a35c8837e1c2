"""Runtime error tree produced by a validation run.

The tree mirrors the shape being validated:

* ``Empty`` for unit variants and values with nothing to report,
* ``Simple`` for a leaf field (the ordered list of rule violations),
* ``ListErrors`` for tuple-shaped results, indexed by position,
* ``FieldErrors`` for record-shaped results, keyed by field name.

A tree is built once per ``validate`` call through the builders below and is
never mutated after ``build()``.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any


class FieldguardError(Exception):
    """Base class for all fieldguard exceptions."""


class Error(FieldguardError):
    """A single rule violation.

    Rule evaluators raise this to report that a value failed a rule.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Error):
            return NotImplemented
        return self.message == other.message

    def __hash__(self) -> int:
        return hash(self.message)

    def __repr__(self) -> str:
        return f"Error({self.message!r})"


class Errors(ABC):
    """Base class of the error tree."""

    @abstractmethod
    def is_empty(self) -> bool:
        """True if no leaf of this tree holds a rule violation."""

    @abstractmethod
    def to_dict(self) -> Any:
        """Convert to plain data for JSON output."""

    @abstractmethod
    def _walk(self, path: str) -> Iterator[tuple[str, Error]]:
        pass

    def flatten(self) -> list[tuple[str, Error]]:
        """List every violation with its path, in tree order.

        Paths join field keys with ``.`` and positions with ``[i]``,
        e.g. ``items[1].name``. Violations at the root have an empty path.
        """
        return list(self._walk(""))

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __str__(self) -> str:
        lines = []
        for path, error in self.flatten():
            lines.append(f"{path}: {error.message}" if path else error.message)
        return "\n".join(lines)

    @staticmethod
    def empty() -> "Empty":
        return EMPTY


class Empty(Errors):
    """Nothing to report."""

    def is_empty(self) -> bool:
        return True

    def to_dict(self) -> Any:
        return None

    def _walk(self, path: str) -> Iterator[tuple[str, Error]]:
        return iter(())

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Empty)

    def __hash__(self) -> int:
        return hash(Empty)

    def __repr__(self) -> str:
        return "Empty()"


EMPTY = Empty()


class Simple(Errors):
    """Rule violations collected for one leaf field."""

    def __init__(self, errors: list[Error] | None = None):
        self.errors: list[Error] = list(errors or [])

    def is_empty(self) -> bool:
        return not self.errors

    def to_dict(self) -> Any:
        return [error.message for error in self.errors]

    def _walk(self, path: str) -> Iterator[tuple[str, Error]]:
        for error in self.errors:
            yield path, error

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Simple) and self.errors == other.errors

    def __repr__(self) -> str:
        return f"Simple({self.errors!r})"


class ListErrors(Errors):
    """Positionally indexed results of a tuple shape or a sequence."""

    def __init__(self, items: list[Errors] | None = None):
        self.items: list[Errors] = list(items or [])

    def is_empty(self) -> bool:
        return all(item.is_empty() for item in self.items)

    def __getitem__(self, index: int) -> Errors:
        return self.items[index]

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> Any:
        return [item.to_dict() for item in self.items]

    def _walk(self, path: str) -> Iterator[tuple[str, Error]]:
        for index, item in enumerate(self.items):
            yield from item._walk(f"{path}[{index}]")

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ListErrors) and self.items == other.items

    def __repr__(self) -> str:
        return f"ListErrors({self.items!r})"


class FieldErrors(Errors):
    """Results of a record shape, keyed by field name or rename key."""

    def __init__(self, fields: dict[str, Errors] | None = None):
        self.fields: dict[str, Errors] = dict(fields or {})

    def is_empty(self) -> bool:
        return all(value.is_empty() for value in self.fields.values())

    def __getitem__(self, key: str) -> Errors:
        return self.fields[key]

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def __len__(self) -> int:
        return len(self.fields)

    def to_dict(self) -> Any:
        return {key: value.to_dict() for key, value in self.fields.items()}

    def _walk(self, path: str) -> Iterator[tuple[str, Error]]:
        for key, value in self.fields.items():
            yield from value._walk(f"{path}.{key}" if path else key)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FieldErrors) and self.fields == other.fields

    def __repr__(self) -> str:
        return f"FieldErrors({self.fields!r})"


class SimpleBuilder:
    """Collects the violations of one leaf field."""

    def __init__(self):
        self._errors: list[Error] = []

    def push(self, error: Error) -> None:
        self._errors.append(error)

    def build(self) -> Simple:
        return Simple(self._errors)


class ListBuilder:
    """Collects positional entries, one per field or element."""

    def __init__(self):
        self._items: list[Errors] = []

    def push(self, errors: Errors) -> None:
        self._items.append(errors)

    def build(self) -> ListErrors:
        return ListErrors(self._items)


class FieldsBuilder:
    """Collects keyed entries, one per field."""

    def __init__(self):
        self._fields: dict[str, Errors] = {}

    def insert(self, key: str, errors: Errors) -> None:
        if key in self._fields:
            raise KeyError(f"duplicate error key: {key}")
        self._fields[key] = errors

    def build(self) -> FieldErrors:
        return FieldErrors(self._fields)


class ValidationError(FieldguardError):
    """Raised by ``validate`` when the error tree is not empty."""

    def __init__(self, errors: Errors):
        self.errors = errors
        super().__init__(str(errors))

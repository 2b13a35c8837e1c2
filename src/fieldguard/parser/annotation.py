"""Field annotation surface.

Fields are annotated with ``typing.Annotated`` and one or more ``guard``
markers::

    name: Annotated[str, guard("length(min=1, max=64), ascii")]
    address: Annotated[Address, guard("dive")]
    cache: Annotated[dict, guard("skip")]

The text is a comma-separated list of ``rule``/``rule(args)`` items and the
markers ``dive``, ``skip`` and ``rename = "key"``. Each item is parsed with
the Python tokenizer and ``ast``, so string literals and lambdas may contain
commas.
"""

import ast
import io
import tokenize
from dataclasses import dataclass

from ..models.shape import AnnotationItem, ItemKind
from .rules import ParseContext, RuleParseError, parse_rule

MARKERS = ("dive", "skip")


@dataclass(frozen=True)
class Guard:
    """Annotation text attached to a field through ``Annotated``."""
    text: str

    def __repr__(self) -> str:
        return f"guard({self.text!r})"


def guard(text: str) -> Guard:
    """Attach validation rules and markers to a field."""
    if not isinstance(text, str):
        raise TypeError(f"guard() expects annotation text, got {type(text).__name__}")
    return Guard(text)


def split_items(text: str) -> list[str]:
    """Split annotation text on commas outside brackets and strings.

    Raises:
        ValueError: brackets are unbalanced or the text cannot be tokenized
    """
    line_offsets = [0]
    for line in text.splitlines(keepends=True):
        line_offsets.append(line_offsets[-1] + len(line))

    def offset(position: tuple[int, int]) -> int:
        row, col = position
        return line_offsets[row - 1] + col

    items: list[str] = []
    depth = 0
    start = 0
    try:
        for token in tokenize.generate_tokens(io.StringIO(text).readline):
            if token.type != tokenize.OP:
                continue
            if token.string in "([{":
                depth += 1
            elif token.string in ")]}":
                depth -= 1
                if depth < 0:
                    raise ValueError(f"unmatched `{token.string}`")
            elif token.string == "," and depth == 0:
                items.append(text[start:offset(token.start)].strip())
                start = offset(token.end)
    except (tokenize.TokenError, SyntaxError) as e:
        message = e.args[0] if e.args else str(e)
        raise ValueError(message)

    last = text[start:].strip()
    if last or not items:
        items.append(last)
    return items


def parse_annotation(text: str, ctx: ParseContext) -> list[AnnotationItem]:
    """Parse annotation text into items, in source order.

    Problems never raise: they come back as ``INVALID`` items carrying
    their message so every problem of a shape can be reported together.
    """
    try:
        parts = split_items(text)
    except ValueError as e:
        return [_invalid(text, f"invalid annotation: {e}")]
    return [parse_item(part, ctx) for part in parts]


def parse_item(text: str, ctx: ParseContext) -> AnnotationItem:
    """Parse one rule or marker item."""
    if not text:
        return _invalid(text, "invalid annotation: empty item")
    try:
        module = ast.parse(text, mode="exec")
    except SyntaxError as e:
        return _invalid(text, f"invalid annotation `{text}`: {e.msg}")
    if len(module.body) != 1:
        return _invalid(text, f"invalid annotation `{text}`")

    statement = module.body[0]
    if isinstance(statement, ast.Assign):
        return _parse_assignment(text, statement)
    if not isinstance(statement, ast.Expr):
        return _invalid(text, f"invalid annotation `{text}`")

    node = statement.value
    call = None
    if isinstance(node, ast.Call):
        call = node
        node = node.func
    if not isinstance(node, ast.Name):
        return _invalid(text, f"unrecognized rule `{text}`")

    name = node.id
    if name in MARKERS:
        if call is not None:
            return _invalid(text, f"`{name}` does not accept any args")
        return AnnotationItem(ItemKind(name), text)
    if name == "rename":
        return _invalid(text, '`rename` expects a value: rename = "key"')

    try:
        rule = parse_rule(name, call, text, ctx)
    except RuleParseError as e:
        return _invalid(text, str(e))
    return AnnotationItem(ItemKind.RULE, text, rule=rule)


def _parse_assignment(text: str, statement: ast.Assign) -> AnnotationItem:
    if len(statement.targets) != 1 or not isinstance(statement.targets[0], ast.Name):
        return _invalid(text, f"invalid annotation `{text}`")
    name = statement.targets[0].id
    if name != "rename":
        return _invalid(text, f"unrecognized attribute `{name}`")
    value = statement.value
    if not isinstance(value, ast.Constant) or not isinstance(value.value, str) or not value.value:
        return _invalid(text, "`rename` expects a non-empty string literal")
    return AnnotationItem(ItemKind.RENAME, text, value=value.value)


def _invalid(text: str, message: str) -> AnnotationItem:
    return AnnotationItem(ItemKind.INVALID, text, message=message)

"""Value types understood by fieldguard shapes.

``TaggedUnion`` marks a tagged union whose variants are its nested classes::

    class Shape(TaggedUnion):
        @dataclass
        class Circle:
            radius: Annotated[float, guard("range(min=0.0)")]

        class Dot:
            pass

The fixed-width integer types carry natural bounds, so a ``range`` rule on
them may omit ``min`` or ``max``. At runtime their values are plain ``int``.
"""

from typing import Any, NewType

from .rules.range import register_bounds


class TaggedUnion:
    """Base class for tagged unions.

    Nested classes are the variants, in declaration order. A variant is a
    dataclass (record-like), a ``NamedTuple`` (tuple-like) or a class
    without fields (unit).
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for variant in cls.variants():
            variant.__fieldguard_union__ = cls

    @classmethod
    def variants(cls) -> list[type]:
        prefix = f"{cls.__qualname__}."
        return [
            value for value in vars(cls).values()
            if isinstance(value, type) and value.__qualname__.startswith(prefix)
        ]

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> Any:
        from .loader import variant_schema

        return variant_schema(cls)


u8 = NewType("u8", int)
u16 = NewType("u16", int)
u32 = NewType("u32", int)
u64 = NewType("u64", int)
i8 = NewType("i8", int)
i16 = NewType("i16", int)
i32 = NewType("i32", int)
i64 = NewType("i64", int)

for _type, _bits in ((u8, 8), (u16, 16), (u32, 32), (u64, 64)):
    register_bounds(_type, 0, 2 ** _bits - 1)
for _type, _bits in ((i8, 8), (i16, 16), (i32, 32), (i64, 64)):
    register_bounds(_type, -(2 ** (_bits - 1)), 2 ** (_bits - 1) - 1)
del _type, _bits

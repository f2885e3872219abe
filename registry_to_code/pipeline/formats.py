"""
Format node definitions.

These nodes describe the shape of every container in a registry. Each
family (Format, ContainerFormat, VariantFormat) is a closed set of frozen
dataclasses; consumers dispatch on the concrete class and raise on anything
they do not recognize.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


class PrimitiveKind(enum.Enum):
    """Primitive formats, valued by their serialized tag."""

    UNIT = "UNIT"
    BOOL = "BOOL"
    I8 = "I8"
    I16 = "I16"
    I32 = "I32"
    I64 = "I64"
    I128 = "I128"
    U8 = "U8"
    U16 = "U16"
    U32 = "U32"
    U64 = "U64"
    U128 = "U128"
    F32 = "F32"
    F64 = "F64"
    CHAR = "CHAR"
    STR = "STR"
    BYTES = "BYTES"


@dataclass(frozen=True)
class Named(Generic[T]):
    """A named component: a struct field or an enum variant."""

    name: str
    value: T


# Formats


@dataclass(frozen=True)
class TypeName:
    """Reference to another container by name."""

    name: str


@dataclass(frozen=True)
class Primitive:
    kind: PrimitiveKind


@dataclass(frozen=True)
class Option:
    format: Format


@dataclass(frozen=True)
class Seq:
    """Variable-length sequence. Elements are stored out of line."""

    format: Format


@dataclass(frozen=True)
class Map:
    """Associative container with unique keys. Entries are stored out of line."""

    key: Format
    value: Format


@dataclass(frozen=True)
class Tuple:
    formats: tuple[Format, ...] = ()


@dataclass(frozen=True)
class FixedArray:
    content: Format
    size: int


@dataclass(frozen=True)
class Variable:
    """Unresolved placeholder left by an unfinished trace."""


Format = TypeName | Primitive | Option | Seq | Map | Tuple | FixedArray | Variable


# Variants


@dataclass(frozen=True)
class UnitVariant:
    pass


@dataclass(frozen=True)
class NewTypeVariant:
    format: Format


@dataclass(frozen=True)
class TupleVariant:
    formats: tuple[Format, ...] = ()


@dataclass(frozen=True)
class StructVariant:
    fields: tuple[Named[Format], ...] = ()


VariantFormat = UnitVariant | NewTypeVariant | TupleVariant | StructVariant


# Containers


@dataclass(frozen=True)
class UnitStruct:
    pass


@dataclass(frozen=True)
class NewTypeStruct:
    format: Format


@dataclass(frozen=True)
class TupleStruct:
    formats: tuple[Format, ...] = ()


@dataclass(frozen=True)
class Struct:
    """Named fields, in wire order."""

    fields: tuple[Named[Format], ...] = ()


@dataclass(frozen=True)
class Enum:
    """Variants keyed by their wire index, expected to be exactly 0..N-1."""

    variants: dict[int, Named[VariantFormat]] = field(default_factory=dict)


ContainerFormat = UnitStruct | NewTypeStruct | TupleStruct | Struct | Enum

# Container name -> shape. Insertion order is not dependency order.
Registry = dict[str, ContainerFormat]

# Shortcuts for the primitive formats
UNIT = Primitive(PrimitiveKind.UNIT)
BOOL = Primitive(PrimitiveKind.BOOL)
I8 = Primitive(PrimitiveKind.I8)
I16 = Primitive(PrimitiveKind.I16)
I32 = Primitive(PrimitiveKind.I32)
I64 = Primitive(PrimitiveKind.I64)
I128 = Primitive(PrimitiveKind.I128)
U8 = Primitive(PrimitiveKind.U8)
U16 = Primitive(PrimitiveKind.U16)
U32 = Primitive(PrimitiveKind.U32)
U64 = Primitive(PrimitiveKind.U64)
U128 = Primitive(PrimitiveKind.U128)
F32 = Primitive(PrimitiveKind.F32)
F64 = Primitive(PrimitiveKind.F64)
CHAR = Primitive(PrimitiveKind.CHAR)
STR = Primitive(PrimitiveKind.STR)
BYTES = Primitive(PrimitiveKind.BYTES)

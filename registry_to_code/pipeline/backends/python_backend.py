"""
Python code generation backend.

Generates Python dataclass code. Enums become a base class with one
dataclass per variant. In runtime-integrated mode the classes are frozen,
primitives use the width-carrying aliases of the serde_types runtime, and
enums carry the INDEX/VARIANTS metadata the binary runtime dispatches on.
"""

from __future__ import annotations

from typing import Any

from ..analyzer import KnownTypes
from ..formats import ContainerFormat, Named, PrimitiveKind, VariantFormat
from .base import CodeBackend


class PythonBackend(CodeBackend):
    """Python code generation backend."""

    TEMPLATE_LANG = "python"
    FILE_EXTENSION = "py"
    COMMENT_PREFIX = "#"
    HEADER_LINES = ["# pyre-ignore-all-errors"]
    CONTAINER_SEPARATOR = "\n\n\n"

    # Variant classes are defined at module level
    FIELD_INDENT = 4
    VARIANT_INDENT = 0
    VARIANT_FIELD_INDENT = 4

    RUNTIME_MODULE = "serde_types"

    TYPE_MAP = {
        PrimitiveKind.UNIT: "st.unit",
        PrimitiveKind.BOOL: "st.bool",
        PrimitiveKind.I8: "st.int8",
        PrimitiveKind.I16: "st.int16",
        PrimitiveKind.I32: "st.int32",
        PrimitiveKind.I64: "st.int64",
        PrimitiveKind.I128: "st.int128",
        PrimitiveKind.U8: "st.uint8",
        PrimitiveKind.U16: "st.uint16",
        PrimitiveKind.U32: "st.uint32",
        PrimitiveKind.U64: "st.uint64",
        PrimitiveKind.U128: "st.uint128",
        PrimitiveKind.F32: "st.float32",
        PrimitiveKind.F64: "st.float64",
        PrimitiveKind.CHAR: "st.char",
        PrimitiveKind.STR: "str",
        PrimitiveKind.BYTES: "Bytes",
    }

    PLAIN_TYPE_MAP = {
        PrimitiveKind.UNIT: "None",
        PrimitiveKind.BOOL: "bool",
        PrimitiveKind.I8: "int",
        PrimitiveKind.I16: "int",
        PrimitiveKind.I32: "int",
        PrimitiveKind.I64: "int",
        PrimitiveKind.I128: "int",
        PrimitiveKind.U8: "int",
        PrimitiveKind.U16: "int",
        PrimitiveKind.U32: "int",
        PrimitiveKind.U64: "int",
        PrimitiveKind.U128: "int",
        PrimitiveKind.F32: "float",
        PrimitiveKind.F64: "float",
        PrimitiveKind.CHAR: "str",
        PrimitiveKind.STR: "str",
        PrimitiveKind.BYTES: "Bytes",
    }

    def quote_primitive(self, kind: PrimitiveKind) -> str:
        if self.config.runtime_integrated:
            return self.TYPE_MAP[kind]
        return self.PLAIN_TYPE_MAP[kind]

    def quote_name(self, name: str) -> str:
        return name

    def quote_indirect(self, name: str) -> str:
        # Forward reference, resolved lazily by typing.get_type_hints
        return f'"{name}"'

    def quote_option(self, inner: str) -> str:
        return f"typing.Optional[{inner}]"

    def quote_seq(self, inner: str) -> str:
        return f"typing.Sequence[{inner}]"

    def quote_map(self, key: str, value: str) -> str:
        return f"Map[{key}, {value}]"

    def quote_tuple(self, items: list[str]) -> str:
        if not items:
            return "typing.Tuple[()]"
        return f"typing.Tuple[{', '.join(items)}]"

    def quote_array(self, content: str, size: int) -> str:
        return self.quote_tuple([content] * size)

    def import_lines(self) -> list[str]:
        # Postponed annotations keep out-of-line references valid before their definition
        lines = [
            "from __future__ import annotations",
            "from dataclasses import dataclass",
            "import typing",
        ]
        if self.config.runtime_integrated:
            lines.append(f"import {self.RUNTIME_MODULE} as st")
        for module, names in self.external_modules():
            lines.append(f"from {module} import {', '.join(names)}")
        return lines

    def alias_lines(self) -> list[str]:
        lines = []
        if "Map" not in self.external_names:
            lines.append("Map = typing.Dict")
        if "Bytes" not in self.external_names:
            lines.append("Bytes = bytes")
        return lines

    def _prepare_class_context(self, name: str, container: ContainerFormat, known: KnownTypes) -> dict[str, Any]:
        """Turn newtype and tuple payloads into a `value` field."""
        ctx = super()._prepare_class_context(name, container, known)
        self._payload_as_field(ctx)
        ctx["decorator"] = "@dataclass(frozen=True)" if self.config.runtime_integrated else "@dataclass"
        ctx["variants_attr"] = self.config.runtime_integrated
        return ctx

    def _prepare_variant_context(self, base: str, index: int, variant: Named[VariantFormat], known: KnownTypes) -> dict[str, Any]:
        ctx = super()._prepare_variant_context(base, index, variant, known)
        self._payload_as_field(ctx)
        ctx["class_name"] = f"{base}__{variant.name}"
        return ctx

    def _payload_as_field(self, ctx: dict[str, Any]) -> None:
        if ctx["kind"] == "newtype":
            ctx["fields"] = [{"name": "value", "type": ctx["types"][0], "doc_lines": []}]
        elif ctx["kind"] == "tuple":
            ctx["fields"] = [{"name": "value", "type": self.quote_tuple(ctx["types"]), "doc_lines": []}]

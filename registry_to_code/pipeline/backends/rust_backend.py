"""
Rust code generation backend.

Generates Rust struct and enum definitions. In runtime-integrated mode the
definitions derive serde's Serialize and Deserialize, and byte buffers use
serde_bytes.
"""

from __future__ import annotations

from typing import Any

from ..analyzer import KnownTypes
from ..formats import ContainerFormat, PrimitiveKind
from .base import CodeBackend


class RustBackend(CodeBackend):
    """Rust code generation backend."""

    TEMPLATE_LANG = "rust"
    FILE_EXTENSION = "rs"
    COMMENT_PREFIX = "///"
    HEADER_LINES = ["#![allow(unused_imports)]"]
    CONTAINER_SEPARATOR = "\n\n"

    FIELD_INDENT = 4
    VARIANT_INDENT = 4
    VARIANT_FIELD_INDENT = 8

    DERIVE_MACROS = "#[derive(Serialize, Deserialize, Clone, Debug, PartialEq, PartialOrd)]"

    TYPE_MAP = {
        PrimitiveKind.UNIT: "()",
        PrimitiveKind.BOOL: "bool",
        PrimitiveKind.I8: "i8",
        PrimitiveKind.I16: "i16",
        PrimitiveKind.I32: "i32",
        PrimitiveKind.I64: "i64",
        PrimitiveKind.I128: "i128",
        PrimitiveKind.U8: "u8",
        PrimitiveKind.U16: "u16",
        PrimitiveKind.U32: "u32",
        PrimitiveKind.U64: "u64",
        PrimitiveKind.U128: "u128",
        PrimitiveKind.F32: "f32",
        PrimitiveKind.F64: "f64",
        PrimitiveKind.CHAR: "char",
        PrimitiveKind.STR: "String",
        PrimitiveKind.BYTES: "Bytes",
    }

    def quote_primitive(self, kind: PrimitiveKind) -> str:
        return self.TYPE_MAP[kind]

    def quote_name(self, name: str) -> str:
        return name

    def quote_indirect(self, name: str) -> str:
        return f"Box<{name}>"

    def quote_option(self, inner: str) -> str:
        return f"Option<{inner}>"

    def quote_seq(self, inner: str) -> str:
        return f"Vec<{inner}>"

    def quote_map(self, key: str, value: str) -> str:
        return f"Map<{key}, {value}>"

    def quote_tuple(self, items: list[str]) -> str:
        if len(items) == 1:
            return f"({items[0]},)"
        return f"({', '.join(items)})"

    def quote_array(self, content: str, size: int) -> str:
        return f"[{content}; {size}]"

    def import_lines(self) -> list[str]:
        lines = []
        if "Map" not in self.external_names:
            lines.append("use std::collections::BTreeMap as Map;")
        if self.config.runtime_integrated:
            lines.append("use serde::{Serialize, Deserialize};")
            if "Bytes" not in self.external_names:
                lines.append("use serde_bytes::ByteBuf as Bytes;")
        for module, names in self.external_modules():
            lines.append(f"use {module}::{{{', '.join(names)}}};")
        return lines

    def alias_lines(self) -> list[str]:
        # Without serde, byte buffers are plain vectors
        if not self.config.runtime_integrated and "Bytes" not in self.external_names:
            return ["type Bytes = Vec<u8>;"]
        return []

    def _prepare_class_context(self, name: str, container: ContainerFormat, known: KnownTypes) -> dict[str, Any]:
        """Add derive macros and visibility to the shared context."""
        ctx = super()._prepare_class_context(name, container, known)
        ctx["derive"] = self.DERIVE_MACROS if self.config.runtime_integrated else ""
        ctx["visibility"] = "pub " if self.config.track_visibility else ""
        return ctx

"""
Base class for code generation backends.

Defines the rendering contract every language-specific backend shares:
type quoting with the inline-vs-indirect policy, doc comment lookup,
external definition suppression and the preamble. Backends only supply
syntax tokens and their Jinja2 templates.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import jinja2

from ...errors import UnfinalizedFormatError
from ..analyzer import KnownTypes, ordered_variants
from ..config import CodeGeneratorConfig
from ..formats import (
    ContainerFormat,
    Enum,
    FixedArray,
    Format,
    Map,
    Named,
    NewTypeStruct,
    NewTypeVariant,
    Option,
    Primitive,
    PrimitiveKind,
    Seq,
    Struct,
    StructVariant,
    Tuple,
    TupleStruct,
    TupleVariant,
    TypeName,
    UnitStruct,
    UnitVariant,
    Variable,
    VariantFormat,
)


class CodeBackend(ABC):
    """Abstract base class for code generation backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    # Line comment token used for doc comments
    COMMENT_PREFIX: str = ""

    # First lines of every generated file
    HEADER_LINES: list[str] = []

    # Appended after each rendered container
    CONTAINER_SEPARATOR: str = "\n\n"

    # Doc comment indentation per nesting level
    FIELD_INDENT: int = 4
    VARIANT_INDENT: int = 4
    VARIANT_FIELD_INDENT: int = 8

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self.external_names = config.external_names
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
        )
        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")
        self.class_template = self.jinja_env.get_template(f"class.{self.FILE_EXTENSION}.jinja2")

    # Syntax tokens

    @abstractmethod
    def quote_primitive(self, kind: PrimitiveKind) -> str:
        """Language type for a primitive format."""

    @abstractmethod
    def quote_name(self, name: str) -> str:
        """Direct reference to a container."""

    @abstractmethod
    def quote_indirect(self, name: str) -> str:
        """Reference to a container through the language's indirection primitive."""

    @abstractmethod
    def quote_option(self, inner: str) -> str:
        pass

    @abstractmethod
    def quote_seq(self, inner: str) -> str:
        pass

    @abstractmethod
    def quote_map(self, key: str, value: str) -> str:
        pass

    @abstractmethod
    def quote_tuple(self, items: list[str]) -> str:
        pass

    @abstractmethod
    def quote_array(self, content: str, size: int) -> str:
        pass

    @abstractmethod
    def import_lines(self) -> list[str]:
        """Import statements of the preamble."""

    @abstractmethod
    def alias_lines(self) -> list[str]:
        """Locally declared built-in aliases of the preamble."""

    # Shared contract

    def quote_type(self, format: Format, known: KnownTypes | None) -> str:
        """
        Translate a format to a language type string.

        Args:
            format: The format to translate
            known: Names already emitted, or None for positions stored out of
                line (sequence and map elements), where references are always
                rendered directly

        Returns:
            Language-specific type string
        """
        if isinstance(format, TypeName):
            if known is not None and format.name not in known:
                return self.quote_indirect(format.name)
            return self.quote_name(format.name)

        if isinstance(format, Primitive):
            return self.quote_primitive(format.kind)

        if isinstance(format, Option):
            return self.quote_option(self.quote_type(format.format, known))

        if isinstance(format, Seq):
            return self.quote_seq(self.quote_type(format.format, None))

        if isinstance(format, Map):
            return self.quote_map(self.quote_type(format.key, None), self.quote_type(format.value, None))

        if isinstance(format, Tuple):
            return self.quote_tuple(self.quote_types(format.formats, known))

        if isinstance(format, FixedArray):
            return self.quote_array(self.quote_type(format.content, known), format.size)

        if isinstance(format, Variable):
            raise UnfinalizedFormatError()

        raise TypeError(f"Unknown format {format!r}")

    def quote_types(self, formats: tuple[Format, ...], known: KnownTypes | None) -> list[str]:
        return [self.quote_type(format, known) for format in formats]

    def doc_lines(self, path: list[str], indentation: int) -> list[str]:
        """
        Format the doc comment attached to a qualified path, if any.

        Args:
            path: [container], [container, field], [container, variant]
                or [container, variant, field]
            indentation: Number of spaces before the comment token

        Returns:
            Comment lines, empty when no comment is attached
        """
        text = self.config.doc_comments.get(".".join(path))
        if text is None:
            return []
        prefix = " " * indentation + self.COMMENT_PREFIX
        return [f"{prefix} {line}" if line.strip() else prefix for line in text.rstrip().split("\n")]

    def external_modules(self) -> list[tuple[str, list[str]]]:
        """External definitions that need an import, sorted by module."""
        return [(module, list(names)) for module, names in sorted(self.config.external_definitions.items()) if module and names]

    def render_preamble(self) -> str:
        """Render the header, imports and built-in aliases of a file."""
        return self.prefix_template.render(
            header_lines=self.HEADER_LINES,
            import_lines=self.import_lines(),
            alias_lines=self.alias_lines(),
        )

    def render(self, name: str, container: ContainerFormat, known: KnownTypes) -> str:
        """
        Render one container definition.

        Externally defined containers render to an empty string. The known
        set is only read; the caller records the name once this returns.

        Args:
            name: Container name
            container: Container shape
            known: Names already emitted, including external ones

        Returns:
            The definition; trailing blank lines are not significant
        """
        if name in self.external_names:
            return ""
        class_ctx = self._prepare_class_context(name, container, known)
        return self.class_template.render(class_ctx)

    def _prepare_class_context(self, name: str, container: ContainerFormat, known: KnownTypes) -> dict[str, Any]:
        """
        Prepare the template context for a container.

        Args:
            name: Container name
            container: Container shape
            known: Names already emitted

        Returns:
            Dictionary of template variables
        """
        ctx: dict[str, Any] = {
            "name": name,
            "doc_lines": self.doc_lines([name], 0),
            "types": [],
            "fields": [],
            "variants": [],
        }

        if isinstance(container, UnitStruct):
            ctx["kind"] = "unit"
        elif isinstance(container, NewTypeStruct):
            ctx["kind"] = "newtype"
            ctx["types"] = [self.quote_type(container.format, known)]
        elif isinstance(container, TupleStruct):
            ctx["kind"] = "tuple"
            ctx["types"] = self.quote_types(container.formats, known)
        elif isinstance(container, Struct):
            ctx["kind"] = "struct"
            ctx["fields"] = self._prepare_fields([name], container.fields, self.FIELD_INDENT, known)
        elif isinstance(container, Enum):
            ctx["kind"] = "enum"
            ctx["variants"] = [
                self._prepare_variant_context(name, index, variant, known)
                for index, variant in enumerate(ordered_variants(name, container))
            ]
        else:
            raise TypeError(f"Unknown container format {container!r}")

        return ctx

    def _prepare_variant_context(self, base: str, index: int, variant: Named[VariantFormat], known: KnownTypes) -> dict[str, Any]:
        """Prepare the template context for an enum variant."""
        ctx: dict[str, Any] = {
            "name": variant.name,
            "index": index,
            "doc_lines": self.doc_lines([base, variant.name], self.VARIANT_INDENT),
            "types": [],
            "fields": [],
        }

        value = variant.value
        if isinstance(value, UnitVariant):
            ctx["kind"] = "unit"
        elif isinstance(value, NewTypeVariant):
            ctx["kind"] = "newtype"
            ctx["types"] = [self.quote_type(value.format, known)]
        elif isinstance(value, TupleVariant):
            ctx["kind"] = "tuple"
            ctx["types"] = self.quote_types(value.formats, known)
        elif isinstance(value, StructVariant):
            ctx["kind"] = "struct"
            ctx["fields"] = self._prepare_fields([base, variant.name], value.fields, self.VARIANT_FIELD_INDENT, known)
        else:
            raise TypeError(f"Unknown variant format {value!r}")

        return ctx

    def _prepare_fields(self, base: list[str], fields: tuple[Named[Format], ...], indentation: int, known: KnownTypes) -> list[dict[str, Any]]:
        """Prepare named fields in declaration order."""
        return [
            {
                "name": field.name,
                "type": self.quote_type(field.value, known),
                "doc_lines": self.doc_lines([*base, field.name], indentation),
            }
            for field in fields
        ]

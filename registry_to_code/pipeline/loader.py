"""
Registry loader.

Parses a persisted registry (YAML or JSON, using the serde-reflection
layout) into format nodes. No analysis happens here: dangling references
and enum gaps are reported later by the analyzer.
"""

from __future__ import annotations

import json
from collections.abc import Hashable
from pathlib import Path
from typing import Any

import yaml

from ..errors import InvalidEnumError, RegistryFormatError
from .formats import (
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
    Registry,
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


class MappingWithRepeats(dict):
    """A dict built from key/value pairs that remembers keys given more than once.

    Both JSON and YAML readers keep the last value of a repeated key, which
    would hide a duplicated enum index or container name from the parser.
    """

    def __init__(self, pairs=()):
        super().__init__()
        self.repeated: list[Any] = []
        for key, value in pairs:
            if key in self:
                self.repeated.append(key)
            self[key] = value


class RegistryLoader(yaml.SafeLoader):
    """SafeLoader producing MappingWithRepeats for every mapping."""

    def construct_registry_mapping(self, node: yaml.MappingNode) -> MappingWithRepeats:
        self.flatten_mapping(node)
        pairs = []
        for key_node, value_node in node.value:
            key = self.construct_object(key_node, deep=True)
            if not isinstance(key, Hashable):
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping", node.start_mark, "found unhashable key", key_node.start_mark
                )
            pairs.append((key, self.construct_object(value_node, deep=True)))
        return MappingWithRepeats(pairs)


RegistryLoader.add_constructor(yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, RegistryLoader.construct_registry_mapping)


def repeated_keys(value: Any) -> list[Any]:
    return getattr(value, "repeated", [])


class RegistryParser:
    """Parses the serde-reflection representation of a registry."""

    PRIMITIVE_TAGS = {kind.value: kind for kind in PrimitiveKind}

    def parse(self, data: Any) -> Registry:
        """
        Parse a registry.

        Args:
            data: Mapping from container name to serialized container format

        Returns:
            Registry preserving the input order
        """
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise RegistryFormatError(f"Expected a mapping of container names, got {type(data).__name__}")
        if repeated_keys(data):
            raise RegistryFormatError(f"Duplicate container {repeated_keys(data)[0]!r}")

        registry: Registry = {}
        for name, value in data.items():
            registry[str(name)] = self.parse_container(value, str(name))
        return registry

    def parse_container(self, value: Any, path: str) -> ContainerFormat:
        if value == "UNITSTRUCT":
            return UnitStruct()

        tag, body = self._single_entry(value, path)
        if tag == "NEWTYPESTRUCT":
            return NewTypeStruct(self.parse_format(body, path))
        if tag == "TUPLESTRUCT":
            return TupleStruct(self._parse_formats(body, path))
        if tag == "STRUCT":
            return Struct(self._parse_fields(body, path))
        if tag == "ENUM":
            return Enum(self._parse_variants(body, path))

        raise RegistryFormatError(f"Unknown container format {tag!r} at {path}")

    def parse_format(self, value: Any, path: str) -> Format:
        if isinstance(value, str):
            if value in self.PRIMITIVE_TAGS:
                return Primitive(self.PRIMITIVE_TAGS[value])
            if value == "VARIABLE":
                return Variable()
            raise RegistryFormatError(f"Unknown format {value!r} at {path}")

        tag, body = self._single_entry(value, path)
        if tag == "TYPENAME":
            if not isinstance(body, str) or not body:
                raise RegistryFormatError(f"TYPENAME expects a name at {path}")
            return TypeName(body)
        if tag == "OPTION":
            return Option(self.parse_format(body, f"{path}.OPTION"))
        if tag == "SEQ":
            return Seq(self.parse_format(body, f"{path}.SEQ"))
        if tag == "MAP":
            if not isinstance(body, dict) or set(body) != {"KEY", "VALUE"} or repeated_keys(body):
                raise RegistryFormatError(f"MAP expects KEY and VALUE at {path}")
            return Map(
                key=self.parse_format(body["KEY"], f"{path}.KEY"),
                value=self.parse_format(body["VALUE"], f"{path}.VALUE"),
            )
        if tag == "TUPLE":
            return Tuple(self._parse_formats(body, path))
        if tag == "TUPLEARRAY":
            if not isinstance(body, dict) or set(body) != {"CONTENT", "SIZE"} or repeated_keys(body):
                raise RegistryFormatError(f"TUPLEARRAY expects CONTENT and SIZE at {path}")
            size = body["SIZE"]
            if isinstance(size, bool) or not isinstance(size, int) or size < 0:
                raise RegistryFormatError(f"TUPLEARRAY size must be a non-negative integer at {path}")
            return FixedArray(content=self.parse_format(body["CONTENT"], f"{path}.CONTENT"), size=size)
        if tag == "VARIABLE":
            return Variable()

        raise RegistryFormatError(f"Unknown format {tag!r} at {path}")

    def parse_variant(self, value: Any, path: str) -> VariantFormat:
        if value == "UNIT":
            return UnitVariant()

        tag, body = self._single_entry(value, path)
        if tag == "NEWTYPE":
            return NewTypeVariant(self.parse_format(body, path))
        if tag == "TUPLE":
            return TupleVariant(self._parse_formats(body, path))
        if tag == "STRUCT":
            return StructVariant(self._parse_fields(body, path))

        raise RegistryFormatError(f"Unknown variant format {tag!r} at {path}")

    def _single_entry(self, value: Any, path: str) -> tuple[str, Any]:
        """Unpack a one-entry mapping such as {"SEQ": "U8"}."""
        if not isinstance(value, dict) or len(value) != 1:
            raise RegistryFormatError(f"Expected a single-entry mapping at {path}, got {value!r}")
        if repeated_keys(value):
            raise RegistryFormatError(f"Duplicate key {repeated_keys(value)[0]!r} at {path}")
        ((tag, body),) = value.items()
        return str(tag), body

    def _parse_formats(self, value: Any, path: str) -> tuple[Format, ...]:
        if not isinstance(value, list):
            raise RegistryFormatError(f"Expected a list of formats at {path}")
        return tuple(self.parse_format(item, f"{path}[{i}]") for i, item in enumerate(value))

    def _variant_index(self, raw_index: Any, path: str) -> int:
        try:
            return int(raw_index)
        except (TypeError, ValueError) as e:
            raise RegistryFormatError(f"Invalid variant index {raw_index!r} at {path}") from e

    def _parse_fields(self, value: Any, path: str) -> tuple[Named[Format], ...]:
        if value is None:
            return ()
        if not isinstance(value, list):
            raise RegistryFormatError(f"Expected a list of named fields at {path}")

        fields = []
        seen = set()
        for item in value:
            name, body = self._single_entry(item, path)
            if name in seen:
                raise RegistryFormatError(f"Duplicate field {name!r} at {path}")
            seen.add(name)
            fields.append(Named(name, self.parse_format(body, f"{path}.{name}")))
        return tuple(fields)

    def _parse_variants(self, value: Any, path: str) -> dict[int, Named[VariantFormat]]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise RegistryFormatError(f"Expected a mapping of variant indices at {path}")

        variants: dict[int, Named[VariantFormat]] = {}
        indices = []
        for raw_index, item in value.items():
            index = self._variant_index(raw_index, path)
            indices.append(index)
            name, body = self._single_entry(item, f"{path}.{index}")
            variants[index] = Named(name, self.parse_variant(body, f"{path}.{name}"))

        indices.extend(self._variant_index(raw_index, path) for raw_index in repeated_keys(value))

        # "1" and 1 collapse to the same index once parsed
        if len(variants) != len(indices):
            raise InvalidEnumError(path, sorted(indices))
        return variants


def parse_registry(data: Any) -> Registry:
    """Parse an already-deserialized registry document."""
    return RegistryParser().parse(data)


def load_registry(path: str | Path) -> Registry:
    """
    Load a registry file.

    Files ending in .json are read as JSON, anything else as YAML. Keys
    repeated within one mapping are reported instead of silently collapsed.

    Args:
        path: Path of the registry file

    Returns:
        The parsed registry
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        if path.suffix == ".json":
            try:
                data = json.load(f, object_pairs_hook=MappingWithRepeats)
            except json.JSONDecodeError as e:
                raise RegistryFormatError(f"Invalid JSON in {path}: {e}") from e
        else:
            try:
                data = yaml.load(f, Loader=RegistryLoader)
            except yaml.YAMLError as e:
                raise RegistryFormatError(f"Invalid YAML in {path}: {e}") from e
    return parse_registry(data)

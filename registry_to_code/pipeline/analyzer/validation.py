"""
Registry validation.

Runs once before any output is produced so that a bad registry fails the
whole run instead of leaving a truncated file behind.
"""

from __future__ import annotations

from collections.abc import Collection

from ...errors import InvalidEnumError, UnfinalizedFormatError, UnknownTypeError
from ..formats import Enum, Named, Registry, VariantFormat
from .dependencies import all_references, container_formats


def ordered_variants(name: str, container: Enum) -> list[Named[VariantFormat]]:
    """
    Return the variants of an enum in index order.

    Raises:
        InvalidEnumError: If the indices are not exactly 0..N-1
    """
    indices = sorted(container.variants)
    if indices != list(range(len(indices))):
        raise InvalidEnumError(name, indices)
    return [container.variants[index] for index in indices]


def validate_registry(registry: Registry, external_names: Collection[str] = ()) -> None:
    """
    Check the invariants a registry must satisfy before emission.

    Args:
        registry: The registry to validate
        external_names: Names supplied outside the generated output

    Raises:
        InvalidEnumError: An enum has missing or duplicate indices
        UnfinalizedFormatError: A Variable placeholder is present
        UnknownTypeError: A reference resolves to nothing
    """
    for name, container in registry.items():
        if name in external_names:
            continue
        if isinstance(container, Enum):
            ordered_variants(name, container)
        for path, format in container_formats(container):
            try:
                references = list(all_references(format))
            except UnfinalizedFormatError as e:
                raise UnfinalizedFormatError(".".join([name, *path])) from e
            for reference in references:
                if reference not in registry and reference not in external_names:
                    raise UnknownTypeError(name, reference)

"""
Exceptions raised while loading, analyzing and rendering a registry.
"""

from __future__ import annotations


class CodeGenerationError(Exception):
    """Base class for all fatal code generation errors."""


class RegistryFormatError(CodeGenerationError):
    """A persisted registry could not be parsed into formats."""


class InvalidEnumError(CodeGenerationError):
    """Enum variant indices are not exactly 0..N-1."""

    def __init__(self, container: str, indices: list[int]):
        self.container = container
        self.indices = indices
        super().__init__(f"Enum {container} has non-contiguous variant indices {indices}, expected 0..{len(indices) - 1}")


class UnfinalizedFormatError(CodeGenerationError):
    """A Variable placeholder was found: the registry was not finalized."""

    def __init__(self, location: str = ""):
        self.location = location
        message = "Unexpected unresolved Variable format"
        if location:
            message += f" in {location}"
        super().__init__(message + ": the registry was not finalized")


class UnknownTypeError(CodeGenerationError):
    """A TypeName resolves to neither the registry nor an external definition."""

    def __init__(self, container: str, reference: str):
        self.container = container
        self.reference = reference
        super().__init__(f"Container {container} references unknown type {reference}")


class OutputValidationError(CodeGenerationError):
    """Generated code failed validation before being written."""

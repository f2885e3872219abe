"""Registry to Code Generator

A Python package for generating type definitions from a registry of
container formats. Supports Python and Rust code generation with
dependency-ordered output, indirection for recursive references, and
an installer for project skeletons.
"""

__version__ = "0.1.0"

from .errors import (
    CodeGenerationError,
    InvalidEnumError,
    OutputValidationError,
    RegistryFormatError,
    UnfinalizedFormatError,
    UnknownTypeError,
)
from .pipeline import (
    AtomicWriter,
    CodeGeneratorConfig,
    Installer,
    IntegrationMode,
    PipelineGenerator,
    load_registry,
    parse_registry,
    quote_container_definitions,
    render_all,
)

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "IntegrationMode",
    "Installer",
    "AtomicWriter",
    "load_registry",
    "parse_registry",
    "render_all",
    "quote_container_definitions",
    "CodeGenerationError",
    "InvalidEnumError",
    "OutputValidationError",
    "RegistryFormatError",
    "UnfinalizedFormatError",
    "UnknownTypeError",
]

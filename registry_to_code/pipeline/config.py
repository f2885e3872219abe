"""
Configuration for the code generator pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum


class IntegrationMode(str, Enum):
    """Output profile of the generated definitions."""

    PLAIN = "plain"  # Data-only definitions
    RUNTIME_INTEGRATED = "runtime-integrated"  # Annotated for the binary encoding runtime


@dataclass
class CodeGeneratorConfig:
    """Configuration options for code generation."""

    # Output profile
    integration_mode: IntegrationMode = IntegrationMode.RUNTIME_INTEGRATED

    # Module name -> type names defined there. The empty module name means the
    # definitions are supplied manually and no import is generated.
    external_definitions: dict[str, list[str]] = field(default_factory=dict)

    # Dotted qualified path ("Test", "Test.a", "Choice.B.x") -> doc comment
    doc_comments: dict[str, str] = field(default_factory=dict)

    # Emit visibility modifiers (Rust `pub`)
    track_visibility: bool = True

    # Validate generated files before they replace the target
    validate_output: bool = True

    @property
    def runtime_integrated(self) -> bool:
        return self.integration_mode == IntegrationMode.RUNTIME_INTEGRATED

    @property
    def external_names(self) -> set[str]:
        """All externally defined type names, regardless of module."""
        return {name for names in self.external_definitions.values() for name in names}

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """
        Create a config from a dictionary.

        Raises:
            ValueError: An option has the wrong shape, such as an unknown
                integration mode or a module mapped to a bare string
        """
        if not isinstance(d, dict):
            raise ValueError(f"Config must be a mapping, got {type(d).__name__}")

        config = CodeGeneratorConfig()
        for k, v in d.items():
            if k == "integration_mode":
                config.integration_mode = IntegrationMode(v)
            elif k == "external_definitions":
                config.external_definitions = _parse_external_definitions(v or {})
            elif k == "doc_comments":
                if not isinstance(v or {}, dict):
                    raise ValueError(f"doc_comments must map dotted paths to text, got {type(v).__name__}")
                config.doc_comments = {str(path): str(text) for path, text in (v or {}).items()}
            elif k in {f.name for f in fields(config)}:
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "integration_mode": self.integration_mode.value,
            "external_definitions": {module: list(names) for module, names in self.external_definitions.items()},
            "doc_comments": dict(self.doc_comments),
            "track_visibility": self.track_visibility,
            "validate_output": self.validate_output,
        }


def _parse_external_definitions(value) -> dict[str, list[str]]:
    if not isinstance(value, dict):
        raise ValueError(f"external_definitions must map module names to type names, got {type(value).__name__}")

    definitions = {}
    for module, names in value.items():
        # A bare string would otherwise be split into single characters
        if not isinstance(names, (list, tuple)) or not all(isinstance(name, str) for name in names):
            raise ValueError(f"external_definitions[{module!r}] must be a list of type names, got {names!r}")
        definitions[str(module)] = list(names)
    return definitions

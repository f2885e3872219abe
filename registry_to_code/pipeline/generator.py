"""
Pipeline generator.

Runs the whole pipeline for one output unit:

1. Validate the registry (dangling references, placeholders, enum indices)
2. Build the hard-dependency graph and a best-effort emission order
3. Render the preamble, then every container in order, growing the known set
4. Write the buffered text to the output sink in a single call
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TextIO

from .analyzer import KnownTypes, best_effort_topological_sort, get_dependency_map, validate_registry
from .backends import BACKENDS
from .config import CodeGeneratorConfig, IntegrationMode
from .formats import Registry

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """Generates the definitions of a registry in one target language."""

    def __init__(self, registry: Registry, config: CodeGeneratorConfig | None = None, language: str = "python3"):
        """
        Initialize the generator.

        Args:
            registry: The finalized registry
            config: Code generation configuration
            language: Target language ("python3" or "rust")
        """
        if language not in BACKENDS:
            raise ValueError(f"Language not supported: {language}")
        self.registry = registry
        self.config = config or CodeGeneratorConfig()
        self.language = language
        self.backend = BACKENDS[language](self.config)

    def emission_order(self) -> list[str]:
        """Validate the registry and compute the order containers are emitted in."""
        external_names = self.config.external_names
        validate_registry(self.registry, external_names)
        dependencies = get_dependency_map(self.registry, external_names)
        order = best_effort_topological_sort(dependencies)
        logger.debug("Emission order for %s: %s", self.language, ", ".join(order))
        return order

    def generate(self) -> str:
        """
        Generate the complete source text.

        Returns:
            Preamble followed by every container definition
        """
        order = self.emission_order()
        known = KnownTypes(self.config.external_names)

        blocks = [self.backend.render_preamble().rstrip("\n")]
        for name in order:
            rendered = self.backend.render(name, self.registry[name], known)
            if rendered:
                blocks.append(rendered.rstrip("\n"))
            known.add(name)

        return self.backend.CONTAINER_SEPARATOR.join(blocks) + "\n"

    def output(self, out: TextIO) -> None:
        """Generate and write the source text. Nothing is written if generation fails."""
        out.write(self.generate())

    def quote_container_definitions(self) -> dict[str, str]:
        """
        Render each container separately, for documentation purposes.

        Returns:
            Mapping from container name to its stripped definition
        """
        result = {}
        known = KnownTypes(self.config.external_names)
        for name in self.emission_order():
            rendered = self.backend.render(name, self.registry[name], known)
            known.add(name)
            if rendered:
                result[name] = rendered.strip() + "\n"
        return result


def render_all(
    out: TextIO,
    registry: Registry,
    config: CodeGeneratorConfig | None = None,
    language: str = "python3",
    integration_mode: IntegrationMode | None = None,
) -> None:
    """
    Write the definitions of a registry to a text stream.

    Args:
        out: Output sink
        registry: The finalized registry
        config: Code generation configuration
        language: Target language
        integration_mode: Overrides the integration mode of the config
    """
    config = config or CodeGeneratorConfig()
    if integration_mode is not None:
        config = dataclasses.replace(config, integration_mode=IntegrationMode(integration_mode))
    PipelineGenerator(registry, config, language).output(out)


def quote_container_definitions(registry: Registry, doc_comments: dict[str, str] | None = None, language: str = "rust") -> dict[str, str]:
    """
    Render plain definitions of every container, without visibility modifiers.

    Args:
        registry: The finalized registry
        doc_comments: Dotted qualified path -> doc comment
        language: Target language

    Returns:
        Mapping from container name to its definition
    """
    config = CodeGeneratorConfig(
        integration_mode=IntegrationMode.PLAIN,
        doc_comments=dict(doc_comments or {}),
        track_visibility=False,
    )
    return PipelineGenerator(registry, config, language).quote_container_definitions()

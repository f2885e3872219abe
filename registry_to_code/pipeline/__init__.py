"""
Pipeline - registry to code generator.

This module turns a registry of container formats into type definitions:

1. Phase 1 (Loader): Parse a persisted registry into format nodes
2. Phase 2 (Analyzer): Validate, build the hard-dependency graph and order containers
3. Phase 3 (Backend): Render the preamble and each container, choosing
   inline or indirect references from the known set
4. Phase 4 (Writer): Write the output atomically, or install a project skeleton
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .config import CodeGeneratorConfig, IntegrationMode
from .generator import PipelineGenerator, quote_container_definitions, render_all
from .installer import Installer
from .loader import load_registry, parse_registry

__all__ = [
    "AtomicWriter",
    "CodeGeneratorConfig",
    "Installer",
    "IntegrationMode",
    "PipelineGenerator",
    "load_registry",
    "parse_registry",
    "quote_container_definitions",
    "render_all",
]

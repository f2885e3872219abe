"""
Installer for generated modules.

Creates a minimal project skeleton (a manifest plus one source file) and
fills the source file with the runtime-integrated definitions of a registry.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import jinja2

from .atomic_writer import AtomicWriter
from .config import CodeGeneratorConfig, IntegrationMode
from .formats import Registry
from .generator import render_all

logger = logging.getLogger(__name__)


class Installer:
    """Installs generated modules into a target directory."""

    # language -> (manifest file, source file relative to the project directory)
    LAYOUTS = {
        "rust": ("Cargo.toml", "src/lib.rs"),
        "python3": ("pyproject.toml", "{name}/__init__.py"),
    }

    TEMPLATE_DIRS = {
        "rust": "rust",
        "python3": "python",
    }

    DEFAULT_VERSION = "0.1.0"

    def __init__(self, install_dir: str | Path, language: str = "rust", writer: AtomicWriter | None = None):
        """
        Initialize the installer.

        Args:
            install_dir: Directory in which projects are created
            language: Target language ("rust" or "python3")
            writer: File writer, an AtomicWriter by default
        """
        if language not in self.LAYOUTS:
            raise ValueError(f"Language not supported: {language}")
        self.install_dir = Path(install_dir)
        self.language = language
        self.writer = writer or AtomicWriter()
        template_dir = Path(__file__).parent.parent / "templates" / self.TEMPLATE_DIRS[language]
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )

    @classmethod
    def parse_public_name(cls, public_name: str) -> tuple[str, str]:
        """Split "name:version" into its parts. The version is optional."""
        name, _, version = public_name.partition(":")
        if not name:
            raise ValueError(f"Invalid module name: {public_name!r}")
        return name, version or cls.DEFAULT_VERSION

    def install_module(self, public_name: str, registry: Registry, config: CodeGeneratorConfig | None = None) -> Path:
        """
        Create a project for the registry.

        Args:
            public_name: Module name, optionally followed by ":version"
            registry: The finalized registry
            config: Code generation configuration; the integration mode is
                always runtime-integrated

        Returns:
            The project directory
        """
        config = config or CodeGeneratorConfig()
        name, version = self.parse_public_name(public_name)
        dir_path = self.install_dir / name
        manifest_file, source_file = self.LAYOUTS[self.language]

        # Render first so that a bad registry leaves no skeleton behind
        source = io.StringIO()
        render_all(source, registry, config, self.language, integration_mode=IntegrationMode.RUNTIME_INTEGRATED)

        manifest = self.jinja_env.get_template(f"{manifest_file}.jinja2").render(name=name, version=version)
        self.writer.write(dir_path / manifest_file, manifest, validate=False)

        source_path = dir_path / source_file.format(name=name)
        self.writer.write(source_path, source.getvalue(), self.language, validate=config.validate_output)

        logger.info("Installed %s %s into %s", name, version, dir_path)
        return dir_path

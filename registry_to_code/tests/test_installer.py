"""
Tests for the installer and the atomic writer.
"""

from __future__ import annotations

import ast
from pathlib import Path

import pytest

from registry_to_code.errors import InvalidEnumError, OutputValidationError
from registry_to_code.pipeline import (
    AtomicWriter,
    CodeGeneratorConfig,
    Installer,
    IntegrationMode,
    load_registry,
    parse_registry,
)

REGISTRIES_DIR = Path(__file__).parent / "test_data" / "registries"


class TestAtomicWriter:
    def test_write(self, tmp_path):
        target = tmp_path / "nested" / "out.py"
        AtomicWriter().write(target, "x = 1\n", "python3")
        assert target.read_text() == "x = 1\n"

    def test_replaces_existing_file(self, tmp_path):
        target = tmp_path / "out.rs"
        target.write_text("old")
        AtomicWriter().write(target, "struct A;\n", "rust")
        assert target.read_text() == "struct A;\n"

    def test_invalid_python_keeps_target(self, tmp_path):
        target = tmp_path / "out.py"
        target.write_text("x = 1\n")
        with pytest.raises(OutputValidationError):
            AtomicWriter().write(target, "class :\n", "python3")
        assert target.read_text() == "x = 1\n"
        assert list(tmp_path.iterdir()) == [target]

    def test_unbalanced_rust(self, tmp_path):
        target = tmp_path / "out.rs"
        with pytest.raises(OutputValidationError, match="unbalanced"):
            AtomicWriter().write(target, "pub struct A {\n", "rust")
        assert not target.exists()

    def test_rust_comments_ignored(self, tmp_path):
        target = tmp_path / "out.rs"
        AtomicWriter().write(target, "/// Maps {a to b\npub struct A;\n", "rust")
        assert target.exists()

    def test_validation_disabled(self, tmp_path):
        target = tmp_path / "out.py"
        AtomicWriter().write(target, "class :\n", "python3", validate=False)
        assert target.read_text() == "class :\n"

    def test_custom_validator(self, tmp_path):
        seen = []
        writer = AtomicWriter(validate_python=seen.append)
        writer.write(tmp_path / "out.py", "class :\n", "python3")
        assert seen == ["class :\n"]


class TestInstaller:
    def test_parse_public_name(self):
        assert Installer.parse_public_name("demo:1.2.3") == ("demo", "1.2.3")
        assert Installer.parse_public_name("demo") == ("demo", "0.1.0")
        with pytest.raises(ValueError):
            Installer.parse_public_name(":1.0")

    def test_rust_project(self, tmp_path):
        registry = load_registry(REGISTRIES_DIR / "recursive.yaml")
        project = Installer(tmp_path, "rust").install_module("demo:1.2.3", registry)

        assert project == tmp_path / "demo"
        manifest = (project / "Cargo.toml").read_text()
        assert 'name = "demo"' in manifest
        assert 'version = "1.2.3"' in manifest
        assert "serde_bytes" in manifest

        source = (project / "src" / "lib.rs").read_text()
        assert "use serde::{Serialize, Deserialize};" in source
        assert "pub next: Option<Box<Node>>," in source

    def test_python_project(self, tmp_path):
        registry = load_registry(REGISTRIES_DIR / "simple.yaml")
        project = Installer(tmp_path, "python3").install_module("demo", registry)

        manifest = (project / "pyproject.toml").read_text()
        assert 'version = "0.1.0"' in manifest
        assert 'packages = ["demo"]' in manifest

        source = (project / "demo" / "__init__.py").read_text()
        assert "import serde_types as st" in source
        ast.parse(source)

    def test_always_runtime_integrated(self, tmp_path):
        registry = load_registry(REGISTRIES_DIR / "simple.yaml")
        config = CodeGeneratorConfig(integration_mode=IntegrationMode.PLAIN)
        project = Installer(tmp_path, "rust").install_module("demo", registry, config)
        assert "#[derive(Serialize, Deserialize" in (project / "src" / "lib.rs").read_text()

    def test_external_definitions_kept(self, tmp_path):
        registry = parse_registry({"Blob": {"STRUCT": [{"data": "BYTES"}]}})
        config = CodeGeneratorConfig(external_definitions={"": ["Bytes"]})
        project = Installer(tmp_path, "rust").install_module("demo", registry, config)
        assert "ByteBuf" not in (project / "src" / "lib.rs").read_text()

    def test_bad_registry_leaves_nothing(self, tmp_path):
        registry = parse_registry({"E": {"ENUM": {"1": {"A": "UNIT"}}}})
        with pytest.raises(InvalidEnumError):
            Installer(tmp_path, "rust").install_module("demo", registry)
        assert not (tmp_path / "demo").exists()

    def test_unknown_language(self, tmp_path):
        with pytest.raises(ValueError):
            Installer(tmp_path, "cobol")


if __name__ == "__main__":
    pytest.main([__file__])

#!/usr/bin/env python3

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from registry_to_code.registry_to_code import registry_to_code

REGISTRIES_DIR = Path(__file__).parent / "test_data" / "registries"
REFERENCE_DIR = Path(__file__).parent / "test_data" / "reference"


@pytest.fixture
def runner():
    return CliRunner()


class TestCli:
    """Test cases for the registry_to_code command"""

    def test_stdout_defaults_to_python(self, runner):
        result = runner.invoke(registry_to_code, [str(REGISTRIES_DIR / "simple.yaml")])
        assert result.exit_code == 0, result.output
        assert result.output == (REFERENCE_DIR / "simple" / "reference.py").read_text()

    def test_rust_to_file(self, runner, tmp_path):
        output = tmp_path / "lib.rs"
        result = runner.invoke(registry_to_code, ["-l", "rust", str(REGISTRIES_DIR / "simple.yaml"), str(output)])
        assert result.exit_code == 0, result.output
        assert output.read_text() == (REFERENCE_DIR / "simple" / "reference.rs").read_text()

    def test_integration_mode_flag(self, runner):
        result = runner.invoke(registry_to_code, ["-l", "rust", "-m", "plain", str(REGISTRIES_DIR / "simple.yaml")])
        assert result.exit_code == 0, result.output
        assert "type Bytes = Vec<u8>;" in result.output
        assert "#[derive" not in result.output

    def test_config_file(self, runner, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"integration_mode": "plain", "doc_comments": {"Test.b": "A pair."}}))
        result = runner.invoke(registry_to_code, ["-l", "rust", "-c", str(config), str(REGISTRIES_DIR / "simple.yaml")])
        assert result.exit_code == 0, result.output
        assert "    /// A pair.\n    pub b: (u32, u32)," in result.output
        assert "serde" not in result.output

    def test_flag_overrides_config_file(self, runner, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"integration_mode": "plain"}))
        result = runner.invoke(
            registry_to_code,
            ["-l", "rust", "-c", str(config), "-m", "runtime-integrated", str(REGISTRIES_DIR / "simple.yaml")],
        )
        assert result.exit_code == 0, result.output
        assert "#[derive(Serialize, Deserialize" in result.output

    def test_malformed_config_file(self, runner, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"external_definitions": {"crate::common": "Address"}}))
        result = runner.invoke(registry_to_code, ["-l", "rust", "-c", str(config), str(REGISTRIES_DIR / "simple.yaml")])
        assert result.exit_code == 2
        assert "--config" in result.output
        assert "crate::common" in result.output

    def test_json_registry(self, runner, tmp_path):
        registry = tmp_path / "registry.json"
        registry.write_text(json.dumps({"Node": {"STRUCT": [{"next": {"OPTION": {"TYPENAME": "Node"}}}]}}))
        result = runner.invoke(registry_to_code, ["--language", "rust", str(registry)])
        assert result.exit_code == 0, result.output
        assert "pub next: Option<Box<Node>>," in result.output

    def test_generation_error(self, runner, tmp_path):
        registry = tmp_path / "registry.json"
        registry.write_text(json.dumps({"E": {"ENUM": {"0": {"A": "UNIT"}, "2": {"C": "UNIT"}}}}))
        output = tmp_path / "out.py"
        result = runner.invoke(registry_to_code, [str(registry), str(output)])
        assert result.exit_code == 1
        assert "non-contiguous" in result.output
        assert not output.exists()

    def test_install(self, runner, tmp_path):
        result = runner.invoke(
            registry_to_code,
            ["-l", "rust", "-n", "demo:0.2.0", "--target-source-dir", str(tmp_path), str(REGISTRIES_DIR / "simple.yaml")],
        )
        assert result.exit_code == 0, result.output
        assert 'version = "0.2.0"' in (tmp_path / "demo" / "Cargo.toml").read_text()
        assert (tmp_path / "demo" / "src" / "lib.rs").exists()

    def test_install_requires_module_name(self, runner, tmp_path):
        result = runner.invoke(registry_to_code, ["--target-source-dir", str(tmp_path), str(REGISTRIES_DIR / "simple.yaml")])
        assert result.exit_code == 2
        assert "--module-name" in result.output

    def test_unknown_language(self, runner):
        result = runner.invoke(registry_to_code, ["-l", "cobol", str(REGISTRIES_DIR / "simple.yaml")])
        assert result.exit_code == 2


if __name__ == "__main__":
    pytest.main([__file__])

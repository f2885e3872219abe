import json
from pathlib import Path

import pytest

from registry_to_code.pipeline import CodeGeneratorConfig, PipelineGenerator, load_registry

REFERENCE_FILES = {
    "python3": "reference.py",
    "rust": "reference.rs",
}


def discover_test_cases():
    """Automatically discover all test cases from the reference directory"""
    reference_dir = Path(__file__).parent / "test_data" / "reference"
    test_cases = []

    for test_dir in sorted(reference_dir.iterdir()):
        if not test_dir.is_dir() or test_dir.name.startswith("."):
            continue

        registry_file = test_dir / "registry.yaml"
        if not registry_file.exists():
            continue

        for language, reference_name in REFERENCE_FILES.items():
            reference_file = test_dir / reference_name
            if reference_file.exists():
                test_cases.append(
                    {
                        "test_name": f"{test_dir.name}_{language}",
                        "registry_file": registry_file,
                        "config_file": test_dir / "config.json",
                        "language": language,
                        "reference_file": reference_file,
                    }
                )

    return test_cases


def load_config(config_file):
    if not config_file.exists():
        return CodeGeneratorConfig()
    with open(config_file) as f:
        return CodeGeneratorConfig.from_dict(json.load(f))


@pytest.mark.parametrize("test_case", discover_test_cases(), ids=lambda tc: tc["test_name"])
def test_reference_file(test_case):
    """Generated output must match the reference file byte for byte"""
    registry = load_registry(test_case["registry_file"])
    config = load_config(test_case["config_file"])

    generated = PipelineGenerator(registry, config, test_case["language"]).generate()

    with open(test_case["reference_file"]) as f:
        reference = f.read()

    assert generated == reference, f"Generated {test_case['language']} output differs from {test_case['reference_file'].name}"


def test_reference_cases_discovered():
    names = {tc["test_name"] for tc in discover_test_cases()}
    assert {"simple_rust", "simple_python3", "choice_plain_rust", "recursive_python3"} <= names


if __name__ == "__main__":
    pytest.main([__file__])

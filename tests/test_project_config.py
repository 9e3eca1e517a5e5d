"""
Test project configuration and setup validity.
"""

import sys
from pathlib import Path

import pytest
import toml

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture(scope="module")
def pyproject():
    with open(PROJECT_ROOT / "pyproject.toml") as f:
        return toml.load(f)


class TestProjectConfiguration:
    """Test that project configuration files are valid and consistent."""

    def test_pyproject_toml_valid(self, pyproject):
        """Test that pyproject.toml has the expected sections."""
        assert "build-system" in pyproject, "Missing [build-system] section"
        assert "project" in pyproject, "Missing [project] section"
        assert isinstance(
            pyproject["project"]["dependencies"], list
        ), "project.dependencies must be a list, not a dict"

    def test_dependencies_format(self, pyproject):
        """Test that dependencies are in correct PEP 621 format."""
        for dep in pyproject["project"]["dependencies"]:
            assert isinstance(dep, str), f"Dependency {dep} must be a string"
            assert (
                ">" in dep or "=" in dep or "[" in dep
            ), f"Dependency {dep} doesn't look like a valid requirement specifier"

    def test_runtime_stack_declared(self, pyproject):
        """Every third-party runtime import must be declared."""
        names = {
            dep.split(">")[0].split("=")[0].split("[")[0].strip().lower()
            for dep in pyproject["project"]["dependencies"]
        }
        assert {"numpy", "polars", "scipy", "loguru", "pydantic", "matplotlib"} <= names

    def test_optional_dependencies_format(self, pyproject):
        """Test that optional dependencies are properly formatted."""
        opt_deps = pyproject["project"].get("optional-dependencies", {})
        assert isinstance(opt_deps, dict), "optional-dependencies must be a dict"
        assert "test" in opt_deps

        for group_name, deps in opt_deps.items():
            assert isinstance(deps, list), f"{group_name} dependencies must be a list"
            for dep in deps:
                assert isinstance(dep, str), f"Dependency {dep} in {group_name} must be a string"

    def test_no_duplicate_keys(self):
        """Test that there are no duplicate section headers."""
        content = (PROJECT_ROOT / "pyproject.toml").read_text()

        sections = []
        for line in content.split("\n"):
            if line.strip().startswith("[") and line.strip().endswith("]"):
                section = line.strip()
                if section in sections:
                    pytest.fail(f"Duplicate section found: {section}")
                sections.append(section)

    def test_python_version_consistency(self, pyproject):
        """Test that the running interpreter satisfies requires-python."""
        requires_python = pyproject["project"].get("requires-python", "")
        assert requires_python.startswith(">="), "requires-python should use >= specifier"

        major, minor = (int(part) for part in requires_python[2:].strip().split(".")[:2])
        assert sys.version_info[:2] >= (major, minor)

    def test_package_name_valid(self, pyproject):
        """Test that package name follows Python naming conventions."""
        name = pyproject["project"]["name"]

        assert name.replace("-", "").replace("_", "").isalnum()
        assert not name[0].isdigit(), f"Package name '{name}' cannot start with a number"


class TestProjectImports:
    """Test that the package can be imported without errors."""

    def test_main_package_importable(self):
        import commitlab

        assert commitlab.__version__

    @pytest.mark.parametrize(
        "module_name",
        [
            "commitlab.analysis",
            "commitlab.demand",
            "commitlab.io",
            "commitlab.modeling",
            "commitlab.utils",
        ],
    )
    def test_submodules_importable(self, module_name):
        __import__(module_name)

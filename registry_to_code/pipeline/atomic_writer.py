"""
Atomic writes of generated source files.

A generated file is either replaced as a whole or left untouched, so an
interrupted run or a failed check never leaves a truncated definition file.
"""

from __future__ import annotations

import ast
import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import OutputValidationError

Validator = Callable[[str], None]


def check_python_syntax(content: str) -> None:
    try:
        ast.parse(content)
    except SyntaxError as e:
        raise OutputValidationError(f"Generated Python code is not valid: {e}") from e


def check_rust_delimiters(content: str) -> None:
    """Cheap sanity check: brackets must balance outside of line comments."""
    code = "\n".join(line for line in content.splitlines() if not line.lstrip().startswith("//"))
    for opening, closing in ("{}", "()", "[]"):
        open_count = code.count(opening)
        close_count = code.count(closing)
        if open_count != close_count:
            raise OutputValidationError(f"Generated Rust code has unbalanced {opening}{closing}: {open_count} open, {close_count} close")


class AtomicWriter:
    """Writes files through a sibling temporary file.

    The content goes to a temporary file next to the target, is checked by
    the validator of its language, and only then renamed over the target.
    """

    def __init__(self, validate_python: Validator | None = None, validate_rust: Validator | None = None):
        """
        Args:
            validate_python: Replaces the syntax check of Python output
            validate_rust: Replaces the delimiter check of Rust output
        """
        self.validators: dict[str, Validator] = {
            "python3": validate_python or check_python_syntax,
            "rust": validate_rust or check_rust_delimiters,
        }

    def write(self, path: Path, content: str, language: str = "", validate: bool = True) -> None:
        """
        Replace the file at path with content.

        Args:
            path: Target file; missing parent directories are created
            content: Full file content
            language: "python3" or "rust" selects a validator, anything else
                is written unchecked
            validate: Run the validator before the rename

        Raises:
            OutputValidationError: The content failed validation; the target
                is unchanged
            OSError: The file system refused the write
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        # The rename is only atomic within one file system
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", text=True)
        tmp_path = Path(tmp_name)
        try:
            with open(fd, "w", encoding="utf-8") as f:
                f.write(content)
            if validate and language in self.validators:
                self.validators[language](content)
            tmp_path.replace(path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

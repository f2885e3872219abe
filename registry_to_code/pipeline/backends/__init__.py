"""
Code generation backends.

Contains language-specific code generators.
"""

from __future__ import annotations

from .base import CodeBackend
from .python_backend import PythonBackend
from .rust_backend import RustBackend

BACKENDS: dict[str, type[CodeBackend]] = {
    "python3": PythonBackend,
    "rust": RustBackend,
}

__all__ = [
    "BACKENDS",
    "CodeBackend",
    "PythonBackend",
    "RustBackend",
]

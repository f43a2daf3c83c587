"""goimpl: generate stub implementations of Go interfaces."""

from __future__ import annotations

from . import errors
from .compare import diff
from .generate import generate
from .options import GenOptions
from .reconcile import reconcile

__all__ = [
    "GenOptions",
    "diff",
    "errors",
    "generate",
    "reconcile",
]

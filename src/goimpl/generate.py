"""Stub generation pipeline: reconcile, assemble, reformat, write."""

from __future__ import annotations

import logging
from typing import IO

from .assemble import render
from .options import GenOptions
from .reconcile import resolve_options
from .reformat import goimports

logger = logging.getLogger(__name__)


def generate(opts: GenOptions, out: IO[str] | None = None) -> str:
    """Generate an empty implementation of `opts.inter`.

    The result is returned and, when `out` is given, written to it. Nothing
    is written if any step fails.
    """
    resolved = resolve_options(opts)
    required = resolved.required_methods()
    logger.debug(
        "generating %s.%s for %s (%d required, %d skipped)",
        resolved.pkg_name,
        resolved.impl_name,
        resolved.inter,
        len(required),
        len(required.keys() & resolved.method_blacklist),
    )
    text = render(required, resolved)
    if not resolved.no_goimports:
        text = goimports(text)
    if out is not None:
        out.write(text)
    return text

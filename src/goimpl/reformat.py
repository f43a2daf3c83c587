from __future__ import annotations

import os
import subprocess

from .errors import ReformatError


def goimports_binary() -> str:
    """Return the goimports executable to run.

    Override with `GOIMPL_GOIMPORTS`.
    """
    return os.environ.get("GOIMPL_GOIMPORTS") or "goimports"


def goimports(text: str) -> str:
    """Format `text` and fix its imports with goimports (read from stdin)."""
    prog = goimports_binary()
    try:
        proc = subprocess.run(
            [prog],
            input=text.encode("utf-8"),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            check=False,
        )
    except FileNotFoundError as e:
        raise ReformatError(
            f"{prog} not found. Install it with "
            "`go install golang.org/x/tools/cmd/goimports@latest` "
            "or pass no_goimports to skip the import fix-up.",
            text,
        ) from e

    stdout = (proc.stdout or b"").decode("utf-8", errors="replace")
    stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
    if proc.returncode != 0:
        raise ReformatError(f"error fixing imports: {stderr.strip() or stdout.strip()}", text, stderr)
    return stdout

from __future__ import annotations

from .typeref import MethodSignature, TypeRef, canonical


def diff(have: MethodSignature, want: MethodSignature) -> str:
    """Describe how `have` differs from `want`.

    Returns an empty string when both signatures are identical. Types are
    compared position by position using their canonical rendering, so
    reordered parameters are reported even if the same types are involved.
    """
    if have.name != want.name:
        return f"names are different: {have.name} != {want.name}"
    a = _diff_list("input", have.inputs, want.inputs)
    b = _diff_list("output", have.outputs, want.outputs)
    if a and b:
        return f"{a}; {b}"
    return a + b


def _diff_list(what: str, have: tuple[TypeRef, ...], want: tuple[TypeRef, ...]) -> str:
    if len(have) != len(want):
        return f"number of {what}s: had {len(have)}, want {len(want)}"
    found: list[str] = []
    for i, (h, w) in enumerate(zip(have, want, strict=True)):
        hs, ws = canonical(h), canonical(w)
        if hs != ws:
            found.append(f"{what}s[{i}]: had '{hs}' want '{ws}'")
    return "; ".join(found)

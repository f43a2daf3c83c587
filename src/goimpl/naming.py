"""Short, unique parameter names for generated methods."""

from __future__ import annotations

from dataclasses import dataclass

from .syntax import KEYWORDS
from .typeref import (
    CONTEXT,
    ERROR,
    MethodSignature,
    TypeRef,
    implements,
    package_and_name,
    referenced_packages,
)


class Scope:
    """Identifiers already taken inside one generated method."""

    def __init__(self, receiver: str, *reserved: str):
        self._names: dict[str, str] = {receiver: "receiver"}
        for r in reserved:
            self._names.setdefault(r, "reserved")

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def reserve(self, name: str, what: str = "param") -> None:
        if name in self._names:
            raise ValueError(f"{name} is already taken")
        self._names[name] = what

    def names(self) -> list[str]:
        return list(self._names)


@dataclass(frozen=True)
class Arg:
    type: TypeRef
    name: str


@dataclass(frozen=True)
class NamedMethod:
    signature: MethodSignature
    inputs: tuple[Arg, ...]
    outputs: tuple[Arg, ...]
    comment: str = ""

    @property
    def name(self) -> str:
        return self.signature.name


def clean(s: str) -> str:
    """Keep only letters."""
    return "".join(r for r in s if r.isalpha())


def first_letter(s: str) -> str:
    """Lowercase first letter of the last dotted part of `s`."""
    if not s:
        return "u"
    for r in s.split(".")[-1]:
        if r.isalpha():
            return r.lower()
    return "z"


def receiver_name(impl_name: str) -> str:
    return first_letter(impl_name)


def _lower_name(s: str) -> tuple[str, str]:
    cleaned = clean(s.split(".")[-1])
    return cleaned.lower(), cleaned


def short_name(t: TypeRef, scope: Scope) -> str:
    """Return a name for a parameter of type `t` that is unique in `scope`.

    The name is reserved in `scope` before returning.
    """
    base = t
    while base.kind in ("pointer", "slice"):
        base = base.elem
    pkg, name = package_and_name(base)
    f = first_letter(name)
    if implements(t, ERROR):
        f = "err"
    elif implements(t, CONTEXT):
        f = "ctx"
    else:
        lowered, cleaned = _lower_name(name)
        # Very short names such as ID or IP.
        if (
            len(lowered) <= 3
            and lowered != cleaned
            and lowered != pkg
            and lowered not in KEYWORDS
        ):
            f = lowered

    candidate = f
    c = 1
    while candidate in scope:
        candidate = f"{f}{c}"
        c += 1
    scope.reserve(candidate)
    return candidate


def name_method(
    sig: MethodSignature,
    receiver: str,
    *,
    current_pkg: str | None = None,
    comment: str = "",
) -> NamedMethod:
    # Parameters must not shadow the receiver, the errors package used by the
    # stub body, or any package qualifying a type in the signature.
    shadowed = ["errors"]
    for t in (*sig.inputs, *sig.outputs):
        for pkg, _path in referenced_packages(t):
            if pkg != current_pkg and pkg not in shadowed:
                shadowed.append(pkg)
    scope = Scope(receiver, *shadowed)
    inputs = tuple(Arg(type=t, name=short_name(t, scope)) for t in sig.inputs)
    outputs = tuple(Arg(type=t, name=short_name(t, scope)) for t in sig.outputs)
    return NamedMethod(signature=sig, inputs=inputs, outputs=outputs, comment=comment)

"""Structured descriptors for Go types and method signatures."""

from __future__ import annotations

from dataclasses import dataclass, replace


KINDS = frozenset(
    {
        "named",
        "primitive",
        "pointer",
        "slice",
        "array",
        "map",
        "chan",
        "func",
        "interface",
        "struct",
    }
)

CHAN_DIRS = ("chan", "<-chan", "chan<-")

# Kinds that wrap a single element type.
_ELEM_KINDS = frozenset({"pointer", "slice", "array", "map", "chan"})


@dataclass(frozen=True)
class TypeRef:
    kind: str
    # Local name (named/primitive).
    name: str = ""
    # Package qualifier as used in source, e.g. "rpc" for net/rpc.
    pkg: str = ""
    # Import path; empty when unknown or for the universe scope.
    pkg_path: str = ""
    elem: TypeRef | None = None
    key: TypeRef | None = None
    length: int = 0
    dir: str = "chan"
    inputs: tuple[TypeRef, ...] = ()
    outputs: tuple[TypeRef, ...] = ()
    fields: tuple[tuple[str, TypeRef], ...] = ()
    # Method set of the type (named types, interfaces, pointers).
    methods: tuple[MethodSignature, ...] = ()
    # Interfaces embedded by an interface type, before expansion.
    embeds: tuple[TypeRef, ...] = ()

    def __post_init__(self) -> None:
        if self.kind not in KINDS:
            raise ValueError(f"unknown type kind: {self.kind!r}")
        if self.kind in _ELEM_KINDS and self.elem is None:
            raise ValueError(f"{self.kind} type requires an element type")
        if self.kind == "map" and self.key is None:
            raise ValueError("map type requires a key type")
        if self.kind in {"named", "primitive"} and not self.name:
            raise ValueError(f"{self.kind} type requires a name")
        if self.kind == "chan" and self.dir not in CHAN_DIRS:
            raise ValueError(f"invalid channel direction: {self.dir!r}")
        if self.embeds and self.kind != "interface":
            raise ValueError("only interface types embed other types")

    def __str__(self) -> str:
        return canonical(self)


@dataclass(frozen=True)
class MethodSignature:
    name: str
    inputs: tuple[TypeRef, ...] = ()
    outputs: tuple[TypeRef, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("method name must not be empty")


MethodSet = dict[str, MethodSignature]


def method_set(methods) -> MethodSet:
    """Index signatures by name, keeping their order."""
    out: MethodSet = {}
    for m in methods:
        if m.name in out:
            raise ValueError(f"duplicate method {m.name}")
        out[m.name] = m
    return out


def named(
    pkg: str,
    name: str,
    *,
    pkg_path: str = "",
    methods: tuple[MethodSignature, ...] = (),
) -> TypeRef:
    return TypeRef(kind="named", pkg=pkg, name=name, pkg_path=pkg_path, methods=tuple(methods))


def primitive(name: str) -> TypeRef:
    return TypeRef(kind="primitive", name=name)


def pointer(elem: TypeRef, *, methods: tuple[MethodSignature, ...] = ()) -> TypeRef:
    return TypeRef(kind="pointer", elem=elem, methods=tuple(methods))


def slice_of(elem: TypeRef) -> TypeRef:
    return TypeRef(kind="slice", elem=elem)


def array_of(length: int, elem: TypeRef) -> TypeRef:
    return TypeRef(kind="array", elem=elem, length=length)


def map_of(key: TypeRef, value: TypeRef) -> TypeRef:
    return TypeRef(kind="map", key=key, elem=value)


def chan_of(elem: TypeRef, dir: str = "chan") -> TypeRef:
    return TypeRef(kind="chan", elem=elem, dir=dir)


def func_of(inputs=(), outputs=()) -> TypeRef:
    return TypeRef(kind="func", inputs=tuple(inputs), outputs=tuple(outputs))


def interface_of(methods=(), embeds=()) -> TypeRef:
    return TypeRef(kind="interface", methods=tuple(methods), embeds=tuple(embeds))


def struct_of(fields=()) -> TypeRef:
    return TypeRef(kind="struct", fields=tuple(fields))


def method(name: str, inputs=(), outputs=()) -> MethodSignature:
    return MethodSignature(name=name, inputs=tuple(inputs), outputs=tuple(outputs))


def canonical(t: TypeRef) -> str:
    """Fully qualified rendering used to decide signature equality."""
    return _render(t, None)


def render(t: TypeRef, current_pkg: str | None) -> str:
    """Render a type as it should appear in source of package `current_pkg`.

    Named types from `current_pkg` (or from the universe scope) are written
    unqualified, everything else as `pkg.Name`. Passing None gives the
    canonical, always-qualified form.
    """
    return _render(t, current_pkg)


def _render(t: TypeRef, current_pkg: str | None) -> str:
    # The canonical form follows reflect.Type.String() spacing; source form
    # follows gofmt.
    source = current_pkg is not None
    k = t.kind
    if k == "named":
        if not t.pkg or t.pkg == current_pkg:
            return t.name
        return f"{t.pkg}.{t.name}"
    if k == "primitive":
        return t.name
    if k == "pointer":
        return f"*{_render(t.elem, current_pkg)}"
    if k == "slice":
        return f"[]{_render(t.elem, current_pkg)}"
    if k == "array":
        return f"[{t.length}]{_render(t.elem, current_pkg)}"
    if k == "map":
        return f"map[{_render(t.key, current_pkg)}]{_render(t.elem, current_pkg)}"
    if k == "chan":
        return f"{t.dir} {_render(t.elem, current_pkg)}"
    if k == "func":
        return "func" + _signature_tail(t.inputs, t.outputs, current_pkg)
    if k == "interface":
        if not t.methods and not t.embeds:
            return "interface{}" if source else "interface {}"
        body = "; ".join(
            [_render(e, current_pkg) for e in t.embeds]
            + [m.name + _signature_tail(m.inputs, m.outputs, current_pkg) for m in t.methods]
        )
        return f"interface {{ {body} }}"
    if k == "struct":
        if not t.fields:
            return "struct{}" if source else "struct {}"
        body = "; ".join(f"{n} {_render(ft, current_pkg)}" for n, ft in t.fields)
        return f"struct {{ {body} }}"
    raise AssertionError(f"unhandled kind {k}")


def _signature_tail(inputs, outputs, current_pkg: str | None) -> str:
    ins = ", ".join(_render(x, current_pkg) for x in inputs)
    outs = [_render(x, current_pkg) for x in outputs]
    tail = f"({ins})"
    if len(outs) == 1:
        tail += " " + outs[0]
    elif outs:
        tail += " (" + ", ".join(outs) + ")"
    return tail


def package_and_name(t: TypeRef) -> tuple[str, str]:
    """Return (package qualifier, local name) of a type.

    Types without a package get an empty qualifier and their canonical
    rendering as the name.
    """
    if t.kind == "named" and t.pkg:
        return t.pkg, t.name
    return "", canonical(t)


def method_set_of(t: TypeRef) -> tuple[MethodSignature, ...]:
    if t.methods:
        return t.methods
    # *T includes the methods declared on T.
    if t.kind == "pointer" and t.elem is not None and t.elem.kind == "named":
        return t.elem.methods
    return ()


def implements(t: TypeRef, capability: TypeRef) -> bool:
    """Report whether `t` structurally provides every method of `capability`."""
    want = method_set_of(capability)
    if not want:
        return False
    have = {m.name: _sig_key(m) for m in method_set_of(t)}
    return all(have.get(m.name) == _sig_key(m) for m in want)


def _sig_key(m: MethodSignature) -> tuple[tuple[str, ...], tuple[str, ...]]:
    return tuple(canonical(x) for x in m.inputs), tuple(canonical(x) for x in m.outputs)


def referenced_packages(t: TypeRef) -> list[tuple[str, str]]:
    """Collect (pkg, pkg_path) of every named type reachable from `t`."""
    out: list[tuple[str, str]] = []

    def walk(x: TypeRef | None) -> None:
        if x is None:
            return
        if x.kind == "named":
            if x.pkg and (x.pkg, x.pkg_path) not in out:
                out.append((x.pkg, x.pkg_path))
            return
        walk(x.elem)
        walk(x.key)
        for y in x.inputs:
            walk(y)
        for y in x.outputs:
            walk(y)
        for _n, y in x.fields:
            walk(y)
        for y in x.embeds:
            walk(y)
        if x.kind == "interface":
            for m in x.methods:
                for y in (*m.inputs, *m.outputs):
                    walk(y)

    walk(t)
    return out


def requalify(t: TypeRef, qualifiers: dict[str, str]) -> TypeRef:
    """Rewrite the package qualifier of named types by import path.

    Method sets carried by named types are left untouched.
    """
    if not qualifiers:
        return t
    if t.kind == "named":
        pkg = qualifiers.get(t.pkg_path) if t.pkg_path else None
        return replace(t, pkg=pkg) if pkg else t

    def sub(x: TypeRef | None) -> TypeRef | None:
        return requalify(x, qualifiers) if x is not None else None

    methods = t.methods
    if t.kind == "interface":
        methods = tuple(
            replace(
                m,
                inputs=tuple(sub(x) for x in m.inputs),
                outputs=tuple(sub(x) for x in m.outputs),
            )
            for m in t.methods
        )
    return replace(
        t,
        elem=sub(t.elem),
        key=sub(t.key),
        inputs=tuple(sub(x) for x in t.inputs),
        outputs=tuple(sub(x) for x in t.outputs),
        fields=tuple((n, sub(x)) for n, x in t.fields),
        methods=methods,
        embeds=tuple(sub(x) for x in t.embeds),
    )


STRING = primitive("string")
BOOL = primitive("bool")
EMPTY_INTERFACE = interface_of()

ERROR = named("", "error", methods=(method("Error", (), (STRING,)),))

TIME = named("time", "Time", pkg_path="time")

CONTEXT = named(
    "context",
    "Context",
    pkg_path="context",
    methods=(
        method("Deadline", (), (TIME, BOOL)),
        method("Done", (), (chan_of(struct_of(), "<-chan"),)),
        method("Err", (), (ERROR,)),
        method("Value", (EMPTY_INTERFACE,), (EMPTY_INTERFACE,)),
    ),
)

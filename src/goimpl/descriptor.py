"""Type descriptor documents (JSON or MessagePack).

A document describes the interface to implement and, optionally, an existing
type:

    {
      "interface": <type>,
      "existing": <type> | null,
      "types": {"rpc.Request": <type>, ...}
    }

A <type> is either a Go type expression string (`"*rpc.Request"`) or a dict
with a `kind` key. Named types written as strings get their package path and
method set from the `types` table; `error` and `context.Context` are known
without it. Interfaces may embed interfaces known from the same table; their
methods are merged in. Methods of an existing type list the receiver as their
first input, the way reflect reports them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import msgpack

from .compare import diff
from .errors import DescriptorError, GoSyntaxError
from .syntax import parse_type
from .typeref import CHAN_DIRS, CONTEXT, ERROR, KINDS, MethodSignature, TypeRef, method_set_of

_MSGPACK_SUFFIXES = {".msgpack", ".mpk"}

_PREDEFINED = {
    "error": ERROR,
    "context.Context": CONTEXT,
}


@dataclass(frozen=True)
class Descriptor:
    interface: TypeRef
    existing: TypeRef | None = None


def _key(t: TypeRef) -> str:
    return f"{t.pkg}.{t.name}" if t.pkg else t.name


class _Decoder:
    def __init__(self, types: dict[str, Any]):
        self.raw = types
        self.done: dict[str, TypeRef] = {}
        self.resolving: set[str] = set()

    def named(self, key: str, shallow: TypeRef) -> TypeRef:
        if key in self.done:
            return self.done[key]
        if key in self.resolving:
            # Self-referencing method sets keep the bare reference.
            return shallow
        raw = self.raw.get(key)
        if raw is None:
            return _PREDEFINED.get(key, shallow)
        self.resolving.add(key)
        try:
            t = self.type_(raw, where=f"types[{key!r}]")
        finally:
            self.resolving.discard(key)
        self.done[key] = t
        return t

    def type_(self, obj: Any, *, where: str) -> TypeRef:
        if isinstance(obj, str):
            try:
                t = parse_type(obj)
            except GoSyntaxError as e:
                raise DescriptorError(f"{where}: invalid type {obj!r}: {e}") from e
            return self.resolve(t, where=where)
        if not isinstance(obj, dict):
            raise DescriptorError(f"{where}: expected a type string or object")

        kind = obj.get("kind")
        if kind not in KINDS:
            raise DescriptorError(f"{where}: unknown kind {kind!r}")

        def sub(name: str) -> TypeRef:
            if name not in obj:
                raise DescriptorError(f"{where}: {kind} type requires {name!r}")
            return self.type_(obj[name], where=f"{where}.{name}")

        def subs(name: str) -> tuple[TypeRef, ...]:
            items = obj.get(name, [])
            if not isinstance(items, list):
                raise DescriptorError(f"{where}.{name}: expected a list")
            return tuple(self.type_(x, where=f"{where}.{name}[{i}]") for i, x in enumerate(items))

        try:
            if kind in {"named", "primitive"}:
                name = obj.get("name")
                pkg = obj.get("pkg", "")
                pkg_path = obj.get("pkg_path", "")
                if not (isinstance(name, str) and isinstance(pkg, str) and isinstance(pkg_path, str)):
                    raise DescriptorError(f"{where}: name, pkg and pkg_path must be strings")
                predefined = _PREDEFINED.get(f"{pkg}.{name}" if pkg else name)
                if kind == "named" and predefined is not None and not obj.get("methods"):
                    return predefined
                return TypeRef(
                    kind=kind,
                    name=name,
                    pkg=pkg,
                    pkg_path=pkg_path,
                    methods=self.methods(obj, where=where),
                )
            if kind in {"pointer", "slice"}:
                return TypeRef(kind=kind, elem=sub("elem"), methods=self.methods(obj, where=where))
            if kind == "array":
                length = obj.get("length")
                if not isinstance(length, int) or isinstance(length, bool) or length < 0:
                    raise DescriptorError(f"{where}: array length must be a non-negative int")
                return TypeRef(kind=kind, elem=sub("elem"), length=length)
            if kind == "map":
                return TypeRef(kind=kind, key=sub("key"), elem=sub("elem"))
            if kind == "chan":
                d = obj.get("dir", "chan")
                if d not in CHAN_DIRS:
                    raise DescriptorError(f"{where}: invalid channel direction {d!r}")
                return TypeRef(kind=kind, elem=sub("elem"), dir=d)
            if kind == "func":
                return TypeRef(kind=kind, inputs=subs("inputs"), outputs=subs("outputs"))
            if kind == "interface":
                t = TypeRef(kind=kind, methods=self.methods(obj, where=where), embeds=subs("embeds"))
                return self.expand(t, where=where) if t.embeds else t
            # struct
            fields = obj.get("fields", [])
            if not isinstance(fields, list):
                raise DescriptorError(f"{where}.fields: expected a list")
            out_fields: list[tuple[str, TypeRef]] = []
            for i, f in enumerate(fields):
                if not isinstance(f, dict) or not isinstance(f.get("name"), str):
                    raise DescriptorError(f"{where}.fields[{i}]: expected {{name, type}}")
                out_fields.append((f["name"], self.type_(f.get("type"), where=f"{where}.fields[{i}]")))
            return TypeRef(kind=kind, fields=tuple(out_fields))
        except ValueError as e:
            raise DescriptorError(f"{where}: {e}") from e

    def methods(self, obj: dict[str, Any], *, where: str) -> tuple[MethodSignature, ...]:
        items = obj.get("methods", [])
        if not isinstance(items, list):
            raise DescriptorError(f"{where}.methods: expected a list")
        out: list[MethodSignature] = []
        seen: set[str] = set()
        for i, m in enumerate(items):
            w = f"{where}.methods[{i}]"
            if not isinstance(m, dict) or not isinstance(m.get("name"), str) or not m["name"]:
                raise DescriptorError(f"{w}: expected an object with a name")
            if m["name"] in seen:
                raise DescriptorError(f"{w}: duplicate method {m['name']}")
            seen.add(m["name"])
            ins = m.get("inputs", [])
            outs = m.get("outputs", [])
            if not isinstance(ins, list) or not isinstance(outs, list):
                raise DescriptorError(f"{w}: inputs and outputs must be lists")
            out.append(
                MethodSignature(
                    name=m["name"],
                    inputs=tuple(self.type_(x, where=f"{w}.inputs[{j}]") for j, x in enumerate(ins)),
                    outputs=tuple(self.type_(x, where=f"{w}.outputs[{j}]") for j, x in enumerate(outs)),
                )
            )
        return tuple(out)

    def resolve(self, t: TypeRef, *, where: str) -> TypeRef:
        """Replace bare named references with their definitions."""
        if t.kind == "named":
            if t.methods or t.pkg_path:
                return t
            return self.named(_key(t), t)

        def sub(x: TypeRef) -> TypeRef:
            return self.resolve(x, where=where)

        t = replace(
            t,
            elem=sub(t.elem) if t.elem is not None else None,
            key=sub(t.key) if t.key is not None else None,
            inputs=tuple(sub(x) for x in t.inputs),
            outputs=tuple(sub(x) for x in t.outputs),
            fields=tuple((n, sub(x)) for n, x in t.fields),
            methods=tuple(
                replace(
                    m,
                    inputs=tuple(sub(x) for x in m.inputs),
                    outputs=tuple(sub(x) for x in m.outputs),
                )
                for m in t.methods
            ),
        )
        if t.embeds:
            return self.expand(t, where=where)
        return t

    def expand(self, t: TypeRef, *, where: str) -> TypeRef:
        """Fold the method sets of embedded interfaces into the interface `t`."""
        embedded: list[MethodSignature] = []
        for e in t.embeds:
            if e.kind == "named" and not e.methods:
                key = _key(e)
                if key not in self.raw and key not in _PREDEFINED:
                    raise DescriptorError(f"{where}: cannot resolve embedded interface {key}")
                e = self.named(key, e)
            if e.kind not in {"named", "interface"}:
                raise DescriptorError(f"{where}: cannot embed {e} in an interface")
            embedded.extend(method_set_of(e))

        merged: dict[str, MethodSignature] = {}
        for m in (*t.methods, *embedded):
            prev = merged.get(m.name)
            if prev is None:
                merged[m.name] = m
            elif diff(prev, m):
                raise DescriptorError(f"{where}: duplicate method {m.name}")
        return replace(t, methods=tuple(merged.values()), embeds=())


def decode_document(obj: Any) -> Descriptor:
    if not isinstance(obj, dict):
        raise DescriptorError("descriptor document must be an object")
    types = obj.get("types")
    if types is None:
        types = {}
    if not isinstance(types, dict) or not all(isinstance(k, str) for k in types):
        raise DescriptorError("types must be an object keyed by type name")
    if "interface" not in obj:
        raise DescriptorError("descriptor document has no interface")

    dec = _Decoder(types)
    inter = dec.type_(obj["interface"], where="interface")
    existing = None
    if obj.get("existing") is not None:
        existing = dec.type_(obj["existing"], where="existing")
    return Descriptor(interface=inter, existing=existing)


def load_descriptor(path: str | Path) -> Descriptor:
    """Read a descriptor document; `.msgpack`/`.mpk` files are MessagePack, others JSON."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise DescriptorError(f"failed to read {path}: {e}") from e
    try:
        if path.suffix in _MSGPACK_SUFFIXES:
            obj = msgpack.unpackb(data, raw=False)
        else:
            obj = json.loads(data.decode("utf-8"))
    except Exception as e:  # noqa: BLE001 - boundary decoding error
        raise DescriptorError(f"failed to decode {path}: {e}") from e
    return decode_document(obj)


def type_to_dict(t: TypeRef) -> dict[str, Any]:
    out: dict[str, Any] = {"kind": t.kind}
    if t.kind in {"named", "primitive"}:
        out["name"] = t.name
        if t.pkg:
            out["pkg"] = t.pkg
        if t.pkg_path:
            out["pkg_path"] = t.pkg_path
    if t.elem is not None:
        out["elem"] = type_to_dict(t.elem)
    if t.key is not None:
        out["key"] = type_to_dict(t.key)
    if t.kind == "array":
        out["length"] = t.length
    if t.kind == "chan":
        out["dir"] = t.dir
    if t.kind == "func":
        out["inputs"] = [type_to_dict(x) for x in t.inputs]
        out["outputs"] = [type_to_dict(x) for x in t.outputs]
    if t.kind == "struct":
        out["fields"] = [{"name": n, "type": type_to_dict(x)} for n, x in t.fields]
    if t.embeds:
        out["embeds"] = [type_to_dict(x) for x in t.embeds]
    if t.methods:
        out["methods"] = [
            {
                "name": m.name,
                "inputs": [type_to_dict(x) for x in m.inputs],
                "outputs": [type_to_dict(x) for x in m.outputs],
            }
            for m in t.methods
        ]
    return out


def dumps(desc: Descriptor, *, fmt: str = "json") -> bytes:
    obj = {
        "interface": type_to_dict(desc.interface),
        "existing": type_to_dict(desc.existing) if desc.existing is not None else None,
    }
    if fmt == "msgpack":
        return msgpack.packb(obj, use_bin_type=True)
    if fmt == "json":
        return json.dumps(obj, indent=2).encode("utf-8")
    raise ValueError(f"unknown descriptor format: {fmt}")

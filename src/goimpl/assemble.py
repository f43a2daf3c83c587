"""Render stub methods as a Go source file."""

from __future__ import annotations

import json
import logging
from dataclasses import replace

from .errors import GoSyntaxError, RenderError
from .naming import NamedMethod, clean, name_method, receiver_name
from .options import GenOptions
from .syntax import check_source
from .typeref import MethodSet, MethodSignature, referenced_packages, render as render_type, requalify

logger = logging.getLogger(__name__)


def package_qualifiers(sigs: list[MethodSignature], opts: GenOptions) -> dict[str, str]:
    """Pick an alias for every import path whose package name is already taken.

    Returns a mapping of import path to alias; paths that keep their package
    name are not listed. Types with an unknown import path keep their name.
    """
    taken: dict[str, str] = {"errors": "errors"}
    for path in opts.extra:
        taken.setdefault(path.rsplit("/", 1)[-1], path)
    out: dict[str, str] = {}
    for sig in sigs:
        for t in (*sig.inputs, *sig.outputs):
            for pkg, path in referenced_packages(t):
                if not path or pkg == opts.pkg_name or path in out:
                    continue
                if taken.setdefault(pkg, path) == path:
                    continue
                n = 1
                while f"{pkg}{n}" in taken:
                    n += 1
                alias = f"{pkg}{n}"
                taken[alias] = path
                out[path] = alias
                logger.debug("importing %s as %s", path, alias)
    return out


def stub_methods(required: MethodSet, opts: GenOptions) -> list[NamedMethod]:
    """Name the arguments of every required method that is not blacklisted."""
    rec = receiver_name(opts.impl_name)
    sigs = [sig for name, sig in required.items() if name not in opts.method_blacklist]
    qualifiers = package_qualifiers(sigs, opts)
    out: list[NamedMethod] = []
    for sig in sigs:
        if qualifiers:
            sig = replace(
                sig,
                inputs=tuple(requalify(x, qualifiers) for x in sig.inputs),
                outputs=tuple(requalify(x, qualifiers) for x in sig.outputs),
            )
        out.append(
            name_method(sig, rec, current_pkg=opts.pkg_name, comment=opts.comments.get(sig.name, ""))
        )
    return out


def imports(methods: list[NamedMethod], opts: GenOptions) -> list[tuple[str, str]]:
    """Return (alias, path) pairs; alias is empty when the path's last element matches."""
    out: list[tuple[str, str]] = []
    seen: set[str] = set()

    def add(alias: str, path: str) -> None:
        if path and path not in seen:
            seen.add(path)
            out.append((alias, path))

    add("", "errors")
    for path in opts.extra:
        add("", path)
    for m in methods:
        for arg in (*m.inputs, *m.outputs):
            for pkg, path in referenced_packages(arg.type):
                if pkg == opts.pkg_name:
                    continue
                add("" if path.rsplit("/", 1)[-1] == pkg else pkg, path)
    return out


def render(required: MethodSet, opts: GenOptions) -> str:
    """Assemble the stub file for `required` using resolved options.

    Raises RenderError, carrying the assembled text, if the result does not
    parse as Go.
    """
    pkg = opts.pkg_name
    impl = opts.impl_name
    rec = receiver_name(impl)
    methods = stub_methods(required, opts)

    lines = [f"package {pkg}", "", "import ("]
    for alias, path in imports(methods, opts):
        spec = json.dumps(path)
        lines.append(f"\t{alias} {spec}" if alias else f"\t{spec}")
    lines.append(")")
    lines.append("")
    lines.append(f"type {clean(impl)} struct{{}}")

    for m in methods:
        lines.append("")
        for c in m.comment.splitlines():
            lines.append(f"// {c}".rstrip())
        lines.append(f"func ({rec} {impl}) {m.name}({_inputs(m, pkg)}){_outputs(m, opts)} {{")
        msg = json.dumps(f"{impl}.{m.name} not implemented")
        lines.append(f"\tpanic(errors.New({msg}))")
        lines.append("}")

    text = "\n".join(lines) + "\n"
    logger.debug("assembled %d method(s) for %s.%s", len(methods), pkg, impl)
    try:
        check_source(text)
    except GoSyntaxError as e:
        raise RenderError(f"error parsing generated code: {e}", text) from e
    return text


def _inputs(m: NamedMethod, pkg: str) -> str:
    return ", ".join(f"{a.name} {render_type(a.type, pkg)}" for a in m.inputs)


def _outputs(m: NamedMethod, opts: GenOptions) -> str:
    if not m.outputs:
        return ""
    pkg = opts.pkg_name
    if opts.no_named_return_values:
        types = [render_type(a.type, pkg) for a in m.outputs]
        if len(types) == 1:
            return " " + types[0]
        return " (" + ", ".join(types) + ")"
    return " (" + ", ".join(f"{a.name} {render_type(a.type, pkg)}" for a in m.outputs) + ")"

"""Decide which required methods an existing type still needs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from .compare import diff
from .errors import ConfigError
from .options import GenOptions
from .syntax import KEYWORDS
from .typeref import MethodSet, method_set, method_set_of, package_and_name

logger = logging.getLogger(__name__)

MISSING = "missing"
MISMATCHED = "mismatched"
SATISFIED = "satisfied"


@dataclass(frozen=True)
class Decision:
    kind: str
    diff: str = ""


@dataclass(frozen=True)
class Reconciliation:
    blacklist: frozenset[str]
    comments: dict[str, str]
    decisions: dict[str, Decision]


def strip_receiver(existing: MethodSet) -> MethodSet:
    """Drop the leading receiver argument of every method."""
    return {name: replace(m, inputs=m.inputs[1:]) for name, m in existing.items()}


def reconcile(
    required: MethodSet,
    existing: MethodSet | None,
    *,
    comments: dict[str, str] | None = None,
    blacklist=None,
) -> Reconciliation:
    """Classify every required method against an existing method set.

    Methods of `existing` are expected to carry the receiver as their first
    input. A method with a matching signature is blacklisted, a mismatched
    one gets the diff appended to its comment, a missing one is left alone.
    The arguments are not modified.
    """
    out_blacklist = set(blacklist or ())
    out_comments = dict(comments or {})
    decisions: dict[str, Decision] = {}
    if existing is None:
        for name in required:
            decisions[name] = Decision(kind=MISSING)
        return Reconciliation(
            blacklist=frozenset(out_blacklist), comments=out_comments, decisions=decisions
        )

    have = strip_receiver(existing)
    for name, want in required.items():
        got = have.get(name)
        if got is None:
            decisions[name] = Decision(kind=MISSING)
            logger.debug("%s: missing", name)
            continue
        d = diff(got, want)
        if d:
            comm = out_comments.get(name, "")
            if comm:
                comm += " "
            out_comments[name] = comm + d
            decisions[name] = Decision(kind=MISMATCHED, diff=d)
            logger.debug("%s: mismatched (%s)", name, d)
        else:
            # Method exists and has the right signature.
            out_blacklist.add(name)
            decisions[name] = Decision(kind=SATISFIED)
            logger.debug("%s: satisfied", name)
    return Reconciliation(
        blacklist=frozenset(out_blacklist), comments=out_comments, decisions=decisions
    )


def resolve_options(opts: GenOptions) -> GenOptions:
    """Return a copy of `opts` with package, type name, blacklist and comments settled."""
    required = opts.required_methods()
    pkg_name, impl_name = opts.pkg_name, opts.impl_name
    blacklist = frozenset(opts.method_blacklist)
    comments = dict(opts.comments)

    et = opts.existing
    if et is not None:
        if impl_name:
            raise ConfigError("only one of impl_name and existing should be set")
        if pkg_name:
            raise ConfigError("only one of pkg_name and existing should be set")
        try:
            existing = method_set(method_set_of(et))
        except ValueError as e:
            raise ConfigError(f"invalid existing type {et}: {e}") from e
        rec = reconcile(required, existing, comments=comments, blacklist=blacklist)
        blacklist, comments = rec.blacklist, rec.comments
        if et.kind == "pointer":
            pkg_name, name = package_and_name(et.elem)
            impl_name = "*" + name
        else:
            pkg_name, impl_name = package_and_name(et)

    if not pkg_name:
        pkg_name, _ = package_and_name(opts.inter)
    if not pkg_name:
        raise ConfigError(f"cannot determine the target package for {opts.inter}; set pkg_name")
    if not pkg_name.isidentifier() or pkg_name in KEYWORDS or pkg_name == "_":
        raise ConfigError(f"invalid package name {pkg_name!r}")
    if not impl_name:
        raise ConfigError("no implementation type; set impl_name or existing")

    return replace(
        opts,
        pkg_name=pkg_name,
        impl_name=impl_name,
        method_blacklist=blacklist,
        comments=comments,
    )

from __future__ import annotations

import argparse
import importlib.metadata
import logging
import sys
from pathlib import Path

from .errors import ConfigError, GoImplError, ReformatError, RenderError


def parse_impl(s: str) -> tuple[str, str]:
    """Split `[*][pkg.]Name` into (package, "[*]Name")."""
    s = s.strip()
    t = s.removeprefix("*")
    ptr = "*" if len(t) != len(s) else ""
    parts = t.split(".")
    if len(parts) == 1:
        return "", ptr + parts[0]
    if len(parts) == 2:
        return parts[0], ptr + parts[1]
    raise ConfigError(f"failed to parse {t!r}: expected [package.]type")


def _parse_comment(s: str) -> tuple[str, str]:
    name, sep, text = s.partition("=")
    if not sep or not name:
        raise ConfigError(f"invalid --comment {s!r}: expected NAME=TEXT")
    return name, text


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="goimpl",
        description="Generate a stub implementation of a Go interface from a type descriptor document.",
    )
    parser.add_argument("--version", action="store_true", help="Print goimpl version.")
    parser.add_argument(
        "descriptor",
        nargs="?",
        help="Descriptor document (.json, or .msgpack/.mpk) describing the interface.",
    )
    parser.add_argument(
        "impl",
        nargs="?",
        default=None,
        help="Implementation type as [*][package.]Name. Not allowed with --existing.",
    )
    parser.add_argument("--pkg", default=None, help="Target package (default: the interface's package).")
    parser.add_argument(
        "--existing",
        action="store_true",
        help="Generate only the missing or wrong methods of the document's existing type.",
    )
    parser.add_argument("--named", action="store_true", help="Generate named return values.")
    parser.add_argument(
        "--no-goimports",
        action="store_true",
        help="Do not run goimports on the generated code. Faster; the result might not compile.",
    )
    parser.add_argument(
        "--import",
        dest="extra",
        action="append",
        default=[],
        metavar="PATH",
        help="Extra import path (repeatable).",
    )
    parser.add_argument(
        "--skip",
        action="append",
        default=[],
        metavar="METHOD",
        help="Do not generate this method (repeatable).",
    )
    parser.add_argument(
        "--comment",
        action="append",
        default=[],
        metavar="METHOD=TEXT",
        help="Comment placed above a generated method (repeatable).",
    )
    parser.add_argument("--out", default=None, help="Output .go file (default: stdout).")
    parser.add_argument("--verbose", action="store_true", help="Print the generated code on error.")

    args = parser.parse_args(argv)
    if args.version:
        try:
            print(importlib.metadata.version("goimpl"))
        except importlib.metadata.PackageNotFoundError:
            print("0.0.0")
        return
    if args.descriptor is None:
        parser.error("the descriptor argument is required")

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    from .descriptor import load_descriptor
    from .generate import generate
    from .options import GenOptions

    try:
        desc = load_descriptor(Path(args.descriptor))
        pkg_name, impl_name = "", ""
        existing = None
        if args.existing:
            if desc.existing is None:
                raise ConfigError(f"{args.descriptor} describes no existing type")
            existing = desc.existing
            if args.impl is not None:
                pkg_name, impl_name = parse_impl(args.impl)
        else:
            if args.impl is None:
                raise ConfigError("an implementation type is required unless --existing is set")
            pkg_name, impl_name = parse_impl(args.impl)
        if args.pkg:
            pkg_name = args.pkg

        opts = GenOptions(
            inter=desc.interface,
            pkg_name=pkg_name,
            impl_name=impl_name,
            existing=existing,
            no_named_return_values=not args.named,
            method_blacklist=frozenset(args.skip),
            comments=dict(_parse_comment(c) for c in args.comment),
            no_goimports=args.no_goimports,
            extra=tuple(args.extra),
        )
        text = generate(opts)
    except GoImplError as e:
        print(f"goimpl: {e}", file=sys.stderr)
        if args.verbose and isinstance(e, (RenderError, ReformatError)):
            print(e.text, file=sys.stderr)
        raise SystemExit(1) from None

    if args.out:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)

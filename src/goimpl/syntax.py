"""Go syntax helpers.

Generated files are checked with the tree-sitter Go grammar. Type
expressions written in descriptor documents, such as
`map[string]*rpc.Request` or `interface { io.Reader; Close() error }`, are
parsed by the small parser below.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from .errors import GoSyntaxError
from .typeref import (
    EMPTY_INTERFACE,
    ERROR,
    MethodSignature,
    TypeRef,
    array_of,
    chan_of,
    func_of,
    interface_of,
    map_of,
    named,
    pointer,
    primitive,
    slice_of,
    struct_of,
)

KEYWORDS = frozenset(
    {
        "break",
        "case",
        "chan",
        "const",
        "continue",
        "default",
        "defer",
        "else",
        "fallthrough",
        "for",
        "func",
        "go",
        "goto",
        "if",
        "import",
        "interface",
        "map",
        "package",
        "range",
        "return",
        "select",
        "struct",
        "switch",
        "type",
        "var",
    }
)

BASIC_TYPES = frozenset(
    {
        "bool",
        "byte",
        "complex64",
        "complex128",
        "float32",
        "float64",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "rune",
        "string",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
        "unsafe.Pointer",
    }
)

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>[ \t\r]+)
    |(?P<nl>\n)
    |(?P<comment>//[^\n]*|/\*.*?\*/)
    |(?P<ident>[^\W\d]\w*)
    |(?P<int>\d+)
    |(?P<string>"(?:[^"\\\n]|\\.)*"|`[^`]*`)
    |(?P<op>\.\.\.|<-|[*\[\](){},.;])
    """,
    re.VERBOSE | re.DOTALL,
)

GO_LANGUAGE = Language(tree_sitter_go.language())


@dataclass(frozen=True)
class Token:
    kind: str  # ident, int, string, op, eof
    value: str
    line: int
    col: int


def tokenize(text: str) -> list[Token]:
    """Split Go text into tokens, inserting semicolons the way Go does."""
    out: list[Token] = []
    pos = 0
    line, line_start = 1, 0

    def needs_semi() -> bool:
        if not out:
            return False
        last = out[-1]
        if last.kind in {"ident", "int", "string"}:
            return last.value not in KEYWORDS or last.value in {"break", "continue", "fallthrough", "return"}
        return last.kind == "op" and last.value in {")", "]", "}"}

    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        col = pos - line_start + 1
        if m is None:
            raise GoSyntaxError(f"illegal character {text[pos]!r}", line, col)
        kind = m.lastgroup
        value = m.group()
        if kind == "nl" or (kind == "comment" and "\n" in value):
            if needs_semi():
                out.append(Token("op", ";", line, col))
            line += value.count("\n")
            line_start = m.start() + value.rfind("\n") + 1
        elif kind not in {"ws", "comment"}:
            out.append(Token(kind, value, line, col))
        pos = m.end()

    col = pos - line_start + 1
    if needs_semi():
        out.append(Token("op", ";", line, col))
    out.append(Token("eof", "", line, col))
    return out


# Tokens that may start a type.
_TYPE_START_OPS = frozenset({"*", "[", "<-", "..."})
_TYPE_START_KEYWORDS = frozenset({"func", "map", "chan", "interface", "struct"})


def _ident_type(pkg: str, name: str) -> TypeRef:
    if pkg:
        if f"{pkg}.{name}" in BASIC_TYPES:
            return primitive(f"{pkg}.{name}")
        return named(pkg, name)
    if name in BASIC_TYPES:
        return primitive(name)
    if name == "error":
        return ERROR
    if name == "any":
        return EMPTY_INTERFACE
    return named("", name)


class _Parser:
    def __init__(self, text: str):
        self.toks = tokenize(text)
        self.i = 0

    def peek(self, offset: int = 0) -> Token:
        j = min(self.i + offset, len(self.toks) - 1)
        return self.toks[j]

    def next(self) -> Token:
        t = self.peek()
        if t.kind != "eof":
            self.i += 1
        return t

    def is_op(self, value: str, offset: int = 0) -> bool:
        t = self.peek(offset)
        return t.kind == "op" and t.value == value

    def is_keyword(self, value: str, offset: int = 0) -> bool:
        t = self.peek(offset)
        return t.kind == "ident" and t.value == value

    def error(self, msg: str, tok: Token | None = None) -> GoSyntaxError:
        tok = tok or self.peek()
        found = tok.value if tok.kind != "eof" else "EOF"
        return GoSyntaxError(f"{msg}, found {found!r}", tok.line, tok.col)

    def expect_op(self, value: str) -> Token:
        if not self.is_op(value):
            raise self.error(f"expected {value!r}")
        return self.next()

    def expect_keyword(self, value: str) -> Token:
        if not self.is_keyword(value):
            raise self.error(f"expected {value!r}")
        return self.next()

    def ident(self) -> str:
        t = self.peek()
        if t.kind != "ident" or t.value in KEYWORDS:
            raise self.error("expected identifier")
        self.next()
        return t.value

    def skip_semis(self) -> None:
        while self.is_op(";"):
            self.next()

    def end_of_list(self, close: str) -> None:
        # Elements in braces end with ';' unless the closing brace follows.
        if self.is_op(";"):
            self.next()
        elif not self.is_op(close):
            raise self.error(f"expected ';' or {close!r}")

    def signature(self) -> tuple[list[TypeRef], list[TypeRef]]:
        inputs = self.parameters()
        outputs: list[TypeRef] = []
        if self.is_op("("):
            outputs = self.parameters()
        elif self.starts_type():
            outputs = [self.type_()]
        return inputs, outputs

    def parameters(self) -> list[TypeRef]:
        """Parse a parameter list and return one type per parameter.

        A bare identifier is a parameter name when other entries are named
        (`a, b int`) and a type name otherwise (`int, error`).
        """
        self.expect_op("(")
        # (name, type); a bare identifier is (name, None) until resolved.
        entries: list[tuple[str, TypeRef | None]] = []
        while not self.is_op(")"):
            t = self.peek()
            if t.kind == "ident" and t.value not in KEYWORDS and not self.is_op(".", 1):
                self.next()
                if self.is_op(",") or self.is_op(")"):
                    entries.append((t.value, None))
                else:
                    entries.append((t.value, self.param_type()))
            else:
                entries.append(("", self.param_type()))
            if not self.is_op(")"):
                self.expect_op(",")
        close = self.next()

        if not any(name and pt is not None for name, pt in entries):
            return [pt if pt is not None else _ident_type("", name) for name, pt in entries]

        types: list[TypeRef] = []
        pending = 0
        for name, pt in entries:
            if pt is None:
                pending += 1
                continue
            if not name:
                raise self.error("mixed named and unnamed parameters", close)
            types.extend([pt] * (pending + 1))
            pending = 0
        if pending:
            raise self.error("mixed named and unnamed parameters", close)
        return types

    def param_type(self) -> TypeRef:
        if self.is_op("..."):
            self.next()
            return slice_of(self.type_())
        return self.type_()

    def starts_type(self) -> bool:
        t = self.peek()
        if t.kind == "op":
            return t.value in _TYPE_START_OPS
        if t.kind == "ident":
            return t.value not in KEYWORDS or t.value in _TYPE_START_KEYWORDS
        return False

    def type_(self) -> TypeRef:
        t = self.peek()
        if t.kind == "op":
            if t.value == "*":
                self.next()
                return pointer(self.type_())
            if t.value == "[":
                self.next()
                if self.is_op("]"):
                    self.next()
                    return slice_of(self.type_())
                n = self.peek()
                if n.kind != "int":
                    raise self.error("expected array length")
                self.next()
                self.expect_op("]")
                return array_of(int(n.value), self.type_())
            if t.value == "<-":
                self.next()
                self.expect_keyword("chan")
                return chan_of(self.type_(), "<-chan")
            raise self.error("expected type")
        if t.kind != "ident":
            raise self.error("expected type")
        if t.value == "map":
            self.next()
            self.expect_op("[")
            key = self.type_()
            self.expect_op("]")
            return map_of(key, self.type_())
        if t.value == "chan":
            self.next()
            if self.is_op("<-"):
                self.next()
                return chan_of(self.type_(), "chan<-")
            return chan_of(self.type_())
        if t.value == "func":
            self.next()
            inputs, outputs = self.signature()
            return func_of(inputs, outputs)
        if t.value == "interface":
            self.next()
            return self.interface_body()
        if t.value == "struct":
            self.next()
            return self.struct_body()
        return self.type_name()

    def type_name(self) -> TypeRef:
        name = self.ident()
        if self.is_op("."):
            self.next()
            return _ident_type(name, self.ident())
        return _ident_type("", name)

    def interface_body(self) -> TypeRef:
        self.expect_op("{")
        self.skip_semis()
        methods: list[MethodSignature] = []
        embeds: list[TypeRef] = []
        while not self.is_op("}"):
            if self.peek().kind == "ident" and self.is_op("(", 1):
                name = self.ident()
                inputs, outputs = self.signature()
                methods.append(MethodSignature(name=name, inputs=tuple(inputs), outputs=tuple(outputs)))
            else:
                embeds.append(self.type_name())
            self.end_of_list("}")
            self.skip_semis()
        self.next()
        if not methods and not embeds:
            return EMPTY_INTERFACE
        return interface_of(methods, embeds)

    def struct_body(self) -> TypeRef:
        self.expect_op("{")
        self.skip_semis()
        fields: list[tuple[str, TypeRef]] = []
        while not self.is_op("}"):
            if self.is_op("*"):
                self.next()
                ft = self.type_name()
                fields.append((ft.name, pointer(ft)))
            elif self.peek().kind == "ident" and (self.is_op(".", 1) or self.is_op(";", 1) or self.is_op("}", 1)):
                ft = self.type_name()
                fields.append((ft.name, ft))
            else:
                names = [self.ident()]
                while self.is_op(","):
                    self.next()
                    names.append(self.ident())
                ft = self.type_()
                fields.extend((n, ft) for n in names)
            if self.peek().kind == "string":
                # Field tag.
                self.next()
            self.end_of_list("}")
            self.skip_semis()
        self.next()
        return struct_of(fields)


def parse_type(text: str) -> TypeRef:
    """Parse a Go type expression such as `map[string]*rpc.Request`."""
    p = _Parser(text)
    t = p.type_()
    p.skip_semis()
    if p.peek().kind != "eof":
        raise p.error("unexpected text after type")
    return t


def _first_error(node: Node) -> Node | None:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def check_source(text: str) -> None:
    """Raise GoSyntaxError unless `text` parses as a Go file."""
    src = text.encode("utf-8")
    tree = Parser(GO_LANGUAGE).parse(src)
    root = tree.root_node
    if not root.has_error:
        return
    bad = _first_error(root)
    if bad is None:
        bad = root
    line, col = bad.start_point[0] + 1, bad.start_point[1] + 1
    if bad.is_missing:
        raise GoSyntaxError(f"missing {bad.type}", line, col)
    snippet = src[bad.start_byte : bad.end_byte].decode("utf-8", errors="replace").split("\n", 1)[0]
    raise GoSyntaxError(f"unexpected {snippet!r}", line, col)

from __future__ import annotations

import pytest

from goimpl.errors import GoSyntaxError
from goimpl.syntax import check_source, parse_type, tokenize
from goimpl.typeref import (
    EMPTY_INTERFACE,
    ERROR,
    canonical,
    named,
    pointer,
    primitive,
    slice_of,
)


def test_tokenize_inserts_semicolons():
    toks = [t.value for t in tokenize("interface {\n\tClose() error\n}\n")]
    assert toks == ["interface", "{", "Close", "(", ")", "error", ";", "}", ";", ""]


def test_check_source_accepts_stub_files():
    check_source(
        """// Package p is generated.
package p

import (
	"errors"
	yaml "gopkg.in/yaml.v3"
)

type T struct{}

/* mismatched */
func (t *T) Do(ctx context.Context, m map[string][]*yaml.Node, f func(int) (bool, error), c <-chan struct{}) (n int, err error) {
	panic(errors.New("*T.Do not implemented"))
}

func (t T) Variadic(args ...interface{}) {
	panic(errors.New("T.Variadic not implemented"))
}
"""
    )


@pytest.mark.parametrize(
    "src",
    [
        "package p\nfunc (t -T) F() {}\n",
        "package p\ntype  struct{}\n",
        "package p\nfunc (t T) F() {\n\tpanic(errors.New(\"x\")\n}\n",
    ],
)
def test_check_source_rejects_bad_files(src):
    with pytest.raises(GoSyntaxError):
        check_source(src)


def test_syntax_error_positions():
    with pytest.raises(GoSyntaxError) as ei:
        check_source("package p\n\ntype T struct{}\n\nfunc (t T) F(x -bad) {}\n")
    assert ei.value.line == 5
    assert str(ei.value).startswith("5:")


def test_parse_type_builds_type_refs():
    assert parse_type("*rpc.Request") == pointer(named("rpc", "Request"))
    assert parse_type("[]byte") == slice_of(primitive("byte"))
    assert parse_type("error") is ERROR
    assert parse_type("any") == EMPTY_INTERFACE
    assert parse_type("interface{}") == EMPTY_INTERFACE
    assert canonical(parse_type("map[string]chan<- int")) == "map[string]chan<- int"
    assert canonical(parse_type("func(int, ...string) (bool, error)")) == "func(int, []string) (bool, error)"
    assert canonical(parse_type("interface{ Error() string }")) == "interface { Error() string }"
    assert canonical(parse_type("struct{ A, B int }")) == "struct { A int; B int }"
    assert canonical(parse_type("<-chan struct{}")) == "<-chan struct {}"


def test_parse_type_grouped_parameters():
    assert canonical(parse_type("func(a, b int) error")) == "func(int, int) error"
    assert (
        canonical(parse_type("func(ctx context.Context, keys ...string) (n int, err error)"))
        == "func(context.Context, []string) (int, error)"
    )
    assert canonical(parse_type("func(a, b int, s string)")) == "func(int, int, string)"
    assert canonical(parse_type("func(int, error)")) == "func(int, error)"


@pytest.mark.parametrize("text", ["func(a int, string)", "func(a, b int, c)", "func(a int, []byte)"])
def test_parse_type_rejects_mixed_parameters(text):
    with pytest.raises(GoSyntaxError, match="mixed named and unnamed"):
        parse_type(text)


def test_parse_type_keeps_embedded_interfaces():
    t = parse_type("interface {\n\tio.Reader\n\tClose() error\n}")
    assert t.embeds == (named("io", "Reader"),)
    assert [m.name for m in t.methods] == ["Close"]
    assert canonical(t) == "interface { io.Reader; Close() error }"


def test_parse_type_rejects_garbage():
    with pytest.raises(GoSyntaxError, match="unexpected text"):
        parse_type("int int")
    with pytest.raises(GoSyntaxError, match="expected type"):
        parse_type("[]")

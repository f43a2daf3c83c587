from __future__ import annotations

import pytest

from goimpl.errors import ConfigError
from goimpl.options import GenOptions
from goimpl.reconcile import MISMATCHED, MISSING, SATISFIED, reconcile, resolve_options
from goimpl.typeref import ERROR, method, method_set, method_set_of, named, pointer, primitive


def test_no_existing_set_generates_everything(client_codec):
    required = method_set(method_set_of(client_codec))
    rec = reconcile(required, None, comments={"Close": "keep me"})
    assert rec.blacklist == frozenset()
    assert rec.comments == {"Close": "keep me"}
    assert {d.kind for d in rec.decisions.values()} == {MISSING}


def test_existing_set_is_classified(client_codec, almost_client_codec):
    required = method_set(method_set_of(client_codec))
    existing = method_set(method_set_of(almost_client_codec))
    rec = reconcile(required, existing)

    assert rec.blacklist == frozenset({"ReadResponseHeader"})
    assert rec.comments == {
        "Close": "number of inputs: had 1, want 0",
        "WriteRequest": (
            "inputs[0]: had 'interface {}' want '*rpc.Request'; "
            "inputs[1]: had '*rpc.Request' want 'interface {}'"
        ),
    }
    assert rec.decisions["Close"].kind == MISMATCHED
    assert rec.decisions["ReadResponseBody"].kind == MISSING
    assert rec.decisions["ReadResponseHeader"].kind == SATISFIED
    assert rec.decisions["ReadResponseBody"].diff == ""


def test_fully_satisfied_set_blacklists_everything(client_codec):
    recv = named("p", "Codec")
    required = method_set(method_set_of(client_codec))
    existing = {
        name: method(name, (recv, *m.inputs), m.outputs) for name, m in required.items()
    }
    rec = reconcile(required, existing)
    assert rec.blacklist == frozenset(required)
    assert rec.comments == {}


def test_diff_is_appended_to_caller_comment(client_codec, almost_client_codec):
    required = method_set(method_set_of(client_codec))
    existing = method_set(method_set_of(almost_client_codec))
    comments = {"Close": "Closes the codec.", "ReadResponseHeader": "untouched"}
    blacklist = frozenset({"ReadResponseBody"})
    rec = reconcile(required, existing, comments=comments, blacklist=blacklist)

    assert rec.comments["Close"] == "Closes the codec. number of inputs: had 1, want 0"
    assert rec.comments["ReadResponseHeader"] == "untouched"
    assert rec.blacklist == frozenset({"ReadResponseBody", "ReadResponseHeader"})
    # Inputs are left alone.
    assert comments == {"Close": "Closes the codec.", "ReadResponseHeader": "untouched"}
    assert existing["Close"].inputs[1] == primitive("int")


def test_resolve_options_uses_existing_type(client_codec, almost_client_codec):
    opts = GenOptions(inter=client_codec, existing=almost_client_codec)
    resolved = resolve_options(opts)
    assert resolved.pkg_name == "goimpl"
    assert resolved.impl_name == "AlmostClientCodec"
    assert resolved.method_blacklist == frozenset({"ReadResponseHeader"})
    assert set(resolved.comments) == {"Close", "WriteRequest"}
    # The caller's options are not modified.
    assert opts.comments == {}
    assert opts.impl_name == ""


def test_resolve_options_pointer_existing(client_codec, almost_client_codec):
    resolved = resolve_options(GenOptions(inter=client_codec, existing=pointer(almost_client_codec)))
    assert resolved.pkg_name == "goimpl"
    assert resolved.impl_name == "*AlmostClientCodec"
    assert resolved.method_blacklist == frozenset({"ReadResponseHeader"})


def test_resolve_options_defaults_to_interface_package(read_closer):
    resolved = resolve_options(GenOptions(inter=read_closer, impl_name="Impl"))
    assert resolved.pkg_name == "io"
    assert resolved.method_blacklist == frozenset()


@pytest.mark.parametrize(
    "kwargs,match",
    [
        ({"impl_name": "Impl"}, "impl_name and existing"),
        ({"pkg_name": "pkg"}, "pkg_name and existing"),
    ],
)
def test_existing_is_exclusive(client_codec, almost_client_codec, kwargs, match):
    with pytest.raises(ConfigError, match=match):
        resolve_options(GenOptions(inter=client_codec, existing=almost_client_codec, **kwargs))


def test_missing_interface_or_package():
    with pytest.raises(ConfigError, match="no interface"):
        resolve_options(GenOptions(impl_name="Impl"))
    builtin = named("", "Closer", methods=(method("Close", (), (ERROR,)),))
    with pytest.raises(ConfigError, match="target package"):
        resolve_options(GenOptions(inter=builtin, impl_name="Impl"))


def test_missing_implementation_type(read_closer):
    with pytest.raises(ConfigError, match="no implementation type"):
        resolve_options(GenOptions(inter=read_closer, pkg_name="pkg"))

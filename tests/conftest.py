import pytest

from goimpl.typeref import (
    ERROR,
    EMPTY_INTERFACE,
    method,
    named,
    pointer,
    primitive,
    slice_of,
)

INT = primitive("int")
UINT8 = primitive("uint8")

RPC_REQUEST = named("rpc", "Request", pkg_path="net/rpc")
RPC_RESPONSE = named("rpc", "Response", pkg_path="net/rpc")


@pytest.fixture
def read_closer():
    return named(
        "io",
        "ReadCloser",
        pkg_path="io",
        methods=(
            method("Close", (), (ERROR,)),
            method("Read", (slice_of(UINT8),), (INT, ERROR)),
        ),
    )


@pytest.fixture
def client_codec():
    return named(
        "rpc",
        "ClientCodec",
        pkg_path="net/rpc",
        methods=(
            method("Close", (), (ERROR,)),
            method("ReadResponseBody", (EMPTY_INTERFACE,), (ERROR,)),
            method("ReadResponseHeader", (pointer(RPC_RESPONSE),), (ERROR,)),
            method("WriteRequest", (pointer(RPC_REQUEST), EMPTY_INTERFACE), (ERROR,)),
        ),
    )


@pytest.fixture
def almost_client_codec():
    # Close has a wrong number of inputs, ReadResponseBody is missing,
    # ReadResponseHeader is right and WriteRequest has its inputs swapped.
    recv = named("goimpl", "AlmostClientCodec", pkg_path="github.com/sasha-s/goimpl")
    return named(
        "goimpl",
        "AlmostClientCodec",
        pkg_path="github.com/sasha-s/goimpl",
        methods=(
            method("Close", (recv, INT), (ERROR,)),
            method("ReadResponseHeader", (recv, pointer(RPC_RESPONSE)), (ERROR,)),
            method("WriteRequest", (recv, EMPTY_INTERFACE, pointer(RPC_REQUEST)), (ERROR,)),
        ),
    )

from __future__ import annotations

import sys

from goimpl import GenOptions, generate
from goimpl.typeref import EMPTY_INTERFACE, ERROR, method, named, pointer, primitive


def main() -> None:
    # Descriptors normally come from a reflection helper; here they are spelled out.
    request = named("rpc", "Request", pkg_path="net/rpc")
    response = named("rpc", "Response", pkg_path="net/rpc")
    codec = named(
        "rpc",
        "ClientCodec",
        pkg_path="net/rpc",
        methods=(
            method("Close", (), (ERROR,)),
            method("ReadResponseBody", (EMPTY_INTERFACE,), (ERROR,)),
            method("ReadResponseHeader", (pointer(response),), (ERROR,)),
            method("WriteRequest", (pointer(request), EMPTY_INTERFACE), (ERROR,)),
        ),
    )

    # --- fresh implementation ---
    generate(GenOptions(inter=codec, pkg_name="client", impl_name="*codec", no_goimports=True), sys.stdout)

    # --- complete an existing type: Close has a wrong signature, the rest is missing ---
    mine = named("client", "Codec", pkg_path="example.com/client")
    existing = pointer(
        mine,
        methods=(method("Close", (pointer(mine), primitive("int")), (ERROR,)),),
    )
    generate(GenOptions(inter=codec, existing=existing, no_goimports=True), sys.stdout)


if __name__ == "__main__":
    main()

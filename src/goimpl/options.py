from __future__ import annotations

from dataclasses import dataclass, field

from .errors import ConfigError
from .typeref import MethodSet, TypeRef, method_set, method_set_of


@dataclass(frozen=True)
class GenOptions:
    """Code generation options.

    `existing` is mutually exclusive with `pkg_name` and `impl_name`: when it
    is set, the package and the implementation type are taken from it.
    """

    # Interface to implement.
    inter: TypeRef | None = None
    # Target package; defaults to the interface's package.
    pkg_name: str = ""
    # Type that would implement the interface, optionally "*"-prefixed.
    impl_name: str = ""
    # Existing type whose missing or wrong methods should be generated.
    existing: TypeRef | None = None
    # Unnamed results only.
    no_named_return_values: bool = False
    # Methods that are never generated.
    method_blacklist: frozenset[str] = frozenset()
    # Method name -> comment placed above the generated method.
    comments: dict[str, str] = field(default_factory=dict)
    # Skip the goimports pass. The generated code might not compile.
    no_goimports: bool = False
    # Import paths always included.
    extra: tuple[str, ...] = ()

    def required_methods(self) -> MethodSet:
        if self.inter is None:
            raise ConfigError("no interface to implement")
        try:
            return method_set(method_set_of(self.inter))
        except ValueError as e:
            raise ConfigError(f"invalid interface {self.inter}: {e}") from e

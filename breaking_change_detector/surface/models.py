"""Data models for the parsed public API surface of a source file."""

from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True)
class Parameter:
    """A single function parameter."""

    name: str
    optional: bool  # True for `?`, a default value, or a rest parameter
    type: str  # raw annotation text, "unknown" when missing
    position: int


@dataclass(frozen=True)
class FunctionSignature:
    """An exported function or arrow-function constant."""

    name: str
    params: tuple[Parameter, ...]
    return_type: str  # raw annotation text, "void" when missing
    is_async: bool = False
    line_number: int = 0
    kind: Literal["function"] = field(default="function", init=False)

    def format(self) -> str:
        """Render the signature back to declaration-like text."""
        params = ", ".join(
            f"{p.name}{'?' if p.optional else ''}: {p.type}" for p in self.params
        )
        prefix = "async " if self.is_async else ""
        return f"{prefix}function {self.name}({params}): {self.return_type}"


@dataclass(frozen=True)
class PropertyDef:
    """A property member of an interface."""

    name: str
    optional: bool
    type: str


@dataclass(frozen=True)
class InterfaceDef:
    """An exported interface."""

    name: str
    extends: tuple[str, ...]
    properties: tuple[PropertyDef, ...]
    line_number: int = 0
    kind: Literal["interface"] = field(default="interface", init=False)

    def get_property(self, name: str) -> PropertyDef | None:
        return next((p for p in self.properties if p.name == name), None)


@dataclass(frozen=True)
class TypeAliasDef:
    """An exported type alias. The definition is compared as opaque text."""

    name: str
    definition: str
    line_number: int = 0
    kind: Literal["type"] = field(default="type", init=False)


Declaration = FunctionSignature | InterfaceDef | TypeAliasDef


@dataclass(frozen=True)
class ApiSurface:
    """The exported declarations of one source file."""

    file_path: str
    functions: tuple[FunctionSignature, ...] = ()
    interfaces: tuple[InterfaceDef, ...] = ()
    types: tuple[TypeAliasDef, ...] = ()
    exports: tuple[str, ...] = ()  # names re-exported via `export { ... }`

    def get_function(self, name: str) -> FunctionSignature | None:
        return _find(self.functions, name)

    def get_interface(self, name: str) -> InterfaceDef | None:
        return _find(self.interfaces, name)

    def get_type(self, name: str) -> TypeAliasDef | None:
        return _find(self.types, name)

    def declares(self, name: str) -> bool:
        """Whether any function, interface or type alias has this name."""
        return any(
            d.name == name for d in (*self.functions, *self.interfaces, *self.types)
        )

    @property
    def is_empty(self) -> bool:
        return not (self.functions or self.interfaces or self.types or self.exports)


def _find(declarations, name):
    # Last declaration wins when a name is repeated.
    for declaration in reversed(declarations):
        if declaration.name == name:
            return declaration
    return None

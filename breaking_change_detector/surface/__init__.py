"""Public API surface extraction from source text."""

from breaking_change_detector.surface.models import (
    ApiSurface,
    Declaration,
    FunctionSignature,
    InterfaceDef,
    Parameter,
    PropertyDef,
    TypeAliasDef,
)
from breaking_change_detector.surface.parser import parse_api_surface

__all__ = [
    # Models
    "ApiSurface",
    "Declaration",
    "FunctionSignature",
    "InterfaceDef",
    "Parameter",
    "PropertyDef",
    "TypeAliasDef",
    # Parsing
    "parse_api_surface",
]

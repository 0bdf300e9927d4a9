"""Compare two API surfaces and report what changed for consumers.

Compatibility rules:

- removing an exported function, interface, type alias or re-export is
  critical;
- narrowing a contract (new required parameter or property, removed
  parameter or property, optional property made required, removed base
  interface, changed parameter/property/return type) is major;
- adding an optional parameter or property, or relaxing a required member to
  optional, is never reported;
- new functions and changed type alias definitions are minor.

All type comparisons are exact string comparisons on the declared text.
"""

import logging

from breaking_change_detector.models import Change, ChangeType
from breaking_change_detector.severity import classify_severity
from breaking_change_detector.surface.models import (
    ApiSurface,
    FunctionSignature,
    InterfaceDef,
    Parameter,
)

logger = logging.getLogger(__name__)


def detect_breaking_changes(
    old_surface: ApiSurface, new_surface: ApiSurface
) -> list[Change]:
    """Detect changes between an old and a new API surface.

    Changes are ordered functions, interfaces, types, then re-exports. Within
    each group, removals and modifications follow the old declaration order
    and additions follow the new declaration order.

    Args:
        old_surface: Surface of the previous snapshot
        new_surface: Surface of the current snapshot

    Returns:
        List of Change objects, empty when the surfaces are equivalent
    """
    changes = [
        *_compare_functions(old_surface, new_surface),
        *_compare_interfaces(old_surface, new_surface),
        *_compare_types(old_surface, new_surface),
        *_compare_exports(old_surface, new_surface),
    ]
    breaking = sum(1 for c in changes if c.is_breaking)
    logger.info(
        f"Detected {len(changes)} changes in {new_surface.file_path} "
        f"({breaking} breaking)"
    )
    return changes


def _change(change_type: ChangeType, **kwargs) -> Change:
    return Change(type=change_type, severity=classify_severity(change_type), **kwargs)


def _compare_functions(old: ApiSurface, new: ApiSurface) -> list[Change]:
    changes = []

    for old_func in old.functions:
        new_func = new.get_function(old_func.name)
        if new_func is None:
            changes.append(
                _change(
                    ChangeType.FUNCTION_REMOVED,
                    name=old_func.name,
                    description=f"Exported function '{old_func.name}' was removed",
                    file_path=old.file_path,
                    line_number=old_func.line_number,
                    previous_value=old_func.format(),
                    migration_hint=(
                        f"Remove usage of '{old_func.name}' or find a replacement"
                    ),
                )
            )
            continue

        changes.extend(_compare_parameters(old_func, new_func, new.file_path))

        if old_func.return_type != new_func.return_type:
            changes.append(
                _change(
                    ChangeType.RETURN_TYPE_CHANGED,
                    name=old_func.name,
                    description=(
                        f"Return type of '{old_func.name}' changed from "
                        f"'{old_func.return_type}' to '{new_func.return_type}'"
                    ),
                    file_path=new.file_path,
                    line_number=new_func.line_number,
                    previous_value=old_func.return_type,
                    current_value=new_func.return_type,
                    migration_hint=(
                        f"Update code that depends on the '{old_func.name}' "
                        "return value"
                    ),
                )
            )

    for new_func in new.functions:
        if old.get_function(new_func.name) is None:
            changes.append(
                _change(
                    ChangeType.FUNCTION_ADDED,
                    name=new_func.name,
                    description=f"Exported function '{new_func.name}' was added",
                    file_path=new.file_path,
                    line_number=new_func.line_number,
                    current_value=new_func.format(),
                )
            )

    return changes


def align_parameters(
    old_params: tuple[Parameter, ...], new_params: tuple[Parameter, ...]
) -> dict[int, Parameter]:
    """Pair old parameters with the new parameters occupying their slot.

    Callers pass arguments by position, so surviving parameters are compared
    in order. A parameter survives if its name exists on both sides, or if
    both sides hold a name unknown to the other at the same position (a
    rename). Everything else was inserted or removed.

    Returns:
        Mapping of old parameter position to its aligned new parameter;
        removed old parameters are absent
    """
    old_names = {p.name for p in old_params}
    new_names = {p.name for p in new_params}

    def renamed(position: int) -> bool:
        return (
            position < len(old_params)
            and position < len(new_params)
            and old_params[position].name not in new_names
            and new_params[position].name not in old_names
        )

    kept_old = [p for p in old_params if p.name in new_names or renamed(p.position)]
    kept_new = [p for p in new_params if p.name in old_names or renamed(p.position)]
    return {old.position: new for old, new in zip(kept_old, kept_new)}


def _compare_parameters(
    old_func: FunctionSignature, new_func: FunctionSignature, file_path: str
) -> list[Change]:
    changes = []
    func = old_func.name
    aligned = align_parameters(old_func.params, new_func.params)

    for old_param in old_func.params:
        new_param = aligned.get(old_param.position)
        if new_param is None:
            if old_param.optional:
                continue
            changes.append(
                _change(
                    ChangeType.PARAMETER_REMOVED,
                    name=f"{func}.{old_param.name}",
                    description=(
                        f"Parameter '{old_param.name}' was removed from '{func}'"
                    ),
                    file_path=file_path,
                    line_number=new_func.line_number,
                    previous_value=f"{old_param.name}: {old_param.type}",
                    migration_hint=(
                        f"Remove the '{old_param.name}' argument when calling '{func}'"
                    ),
                )
            )
        elif old_param.type != new_param.type:
            changes.append(
                _change(
                    ChangeType.PARAMETER_TYPE_CHANGED,
                    name=f"{func}.{old_param.name}",
                    description=(
                        f"Type of parameter '{old_param.name}' in '{func}' changed "
                        f"from '{old_param.type}' to '{new_param.type}'"
                    ),
                    file_path=file_path,
                    line_number=new_func.line_number,
                    previous_value=old_param.type,
                    current_value=new_param.type,
                    migration_hint=(
                        f"Update the '{old_param.name}' argument type when "
                        f"calling '{func}'"
                    ),
                )
            )

    surviving = {p.position for p in aligned.values()}
    for new_param in new_func.params:
        if new_param.position in surviving or new_param.optional:
            continue
        changes.append(
            _change(
                ChangeType.PARAMETER_ADDED_REQUIRED,
                name=f"{func}.{new_param.name}",
                description=(
                    f"New required parameter '{new_param.name}' added to '{func}'"
                ),
                file_path=file_path,
                line_number=new_func.line_number,
                current_value=f"{new_param.name}: {new_param.type}",
                migration_hint=(
                    f"Pass a '{new_param.name}' argument when calling '{func}'"
                ),
            )
        )

    return changes


def _compare_interfaces(old: ApiSurface, new: ApiSurface) -> list[Change]:
    changes = []

    for old_iface in old.interfaces:
        new_iface = new.get_interface(old_iface.name)
        if new_iface is None:
            changes.append(
                _change(
                    ChangeType.INTERFACE_REMOVED,
                    name=old_iface.name,
                    description=f"Exported interface '{old_iface.name}' was removed",
                    file_path=old.file_path,
                    line_number=old_iface.line_number,
                    migration_hint=(
                        f"Remove usage of the '{old_iface.name}' interface or "
                        "find a replacement"
                    ),
                )
            )
            continue

        changes.extend(_compare_properties(old_iface, new_iface, new.file_path))

    return changes


def _compare_properties(
    old_iface: InterfaceDef, new_iface: InterfaceDef, file_path: str
) -> list[Change]:
    changes = []
    iface = old_iface.name

    for old_prop in old_iface.properties:
        name = f"{iface}.{old_prop.name}"
        new_prop = new_iface.get_property(old_prop.name)
        if new_prop is None:
            changes.append(
                _change(
                    ChangeType.INTERFACE_PROPERTY_REMOVED,
                    name=name,
                    description=(
                        f"Property '{old_prop.name}' was removed from "
                        f"interface '{iface}'"
                    ),
                    file_path=file_path,
                    line_number=new_iface.line_number,
                    previous_value=f"{old_prop.name}: {old_prop.type}",
                    migration_hint=(
                        f"Stop reading '{old_prop.name}' from '{iface}' values"
                    ),
                )
            )
            continue

        if old_prop.type != new_prop.type:
            changes.append(
                _change(
                    ChangeType.INTERFACE_PROPERTY_TYPE_CHANGED,
                    name=name,
                    description=(
                        f"Type of property '{old_prop.name}' in '{iface}' changed "
                        f"from '{old_prop.type}' to '{new_prop.type}'"
                    ),
                    file_path=file_path,
                    line_number=new_iface.line_number,
                    previous_value=old_prop.type,
                    current_value=new_prop.type,
                    migration_hint=(
                        f"Update the type of '{old_prop.name}' in objects "
                        f"implementing '{iface}'"
                    ),
                )
            )

        if old_prop.optional and not new_prop.optional:
            changes.append(
                _change(
                    ChangeType.INTERFACE_PROPERTY_REQUIRED,
                    name=name,
                    description=(
                        f"Property '{old_prop.name}' in '{iface}' changed from "
                        "optional to required"
                    ),
                    file_path=file_path,
                    line_number=new_iface.line_number,
                    previous_value=f"{old_prop.name}?: {old_prop.type}",
                    current_value=f"{new_prop.name}: {new_prop.type}",
                    migration_hint=(
                        f"Provide '{old_prop.name}' in all objects implementing "
                        f"'{iface}'"
                    ),
                )
            )

    removed_bases = [b for b in old_iface.extends if b not in new_iface.extends]
    if removed_bases:
        changes.append(
            _change(
                ChangeType.INTERFACE_EXTENDS_CHANGED,
                name=iface,
                description=(
                    f"Interface '{iface}' no longer extends "
                    + ", ".join(f"'{b}'" for b in removed_bases)
                ),
                file_path=file_path,
                line_number=new_iface.line_number,
                previous_value=", ".join(old_iface.extends),
                current_value=", ".join(new_iface.extends),
                migration_hint=(
                    f"Stop relying on members inherited by '{iface}' from "
                    + ", ".join(removed_bases)
                ),
            )
        )

    for new_prop in new_iface.properties:
        if new_prop.optional or old_iface.get_property(new_prop.name) is not None:
            continue
        changes.append(
            _change(
                ChangeType.INTERFACE_PROPERTY_ADDED,
                name=f"{iface}.{new_prop.name}",
                description=(
                    f"New required property '{new_prop.name}' added to "
                    f"interface '{iface}'"
                ),
                file_path=file_path,
                line_number=new_iface.line_number,
                current_value=f"{new_prop.name}: {new_prop.type}",
                migration_hint=(
                    f"Provide '{new_prop.name}' in all objects implementing "
                    f"'{iface}'"
                ),
            )
        )

    return changes


def _compare_types(old: ApiSurface, new: ApiSurface) -> list[Change]:
    changes = []

    for old_type in old.types:
        new_type = new.get_type(old_type.name)
        if new_type is None:
            changes.append(
                _change(
                    ChangeType.TYPE_REMOVED,
                    name=old_type.name,
                    description=f"Exported type '{old_type.name}' was removed",
                    file_path=old.file_path,
                    line_number=old_type.line_number,
                    previous_value=old_type.definition,
                    migration_hint=(
                        f"Remove usage of the '{old_type.name}' type or find a "
                        "replacement"
                    ),
                )
            )
        elif old_type.definition != new_type.definition:
            changes.append(
                _change(
                    ChangeType.TYPE_CHANGED,
                    name=old_type.name,
                    description=f"Definition of type '{old_type.name}' changed",
                    file_path=new.file_path,
                    line_number=new_type.line_number,
                    previous_value=old_type.definition,
                    current_value=new_type.definition,
                    migration_hint=(
                        f"Review usage of '{old_type.name}' for compatibility"
                    ),
                )
            )

    return changes


def _compare_exports(old: ApiSurface, new: ApiSurface) -> list[Change]:
    changes = []

    for name in old.exports:
        # Moving a re-exported symbol to a direct declaration keeps it public.
        if name in new.exports or new.declares(name):
            continue
        changes.append(
            _change(
                ChangeType.EXPORT_REMOVED,
                name=name,
                description=f"Re-export of '{name}' was removed",
                file_path=old.file_path,
                line_number=0,
                migration_hint=f"Import '{name}' from its defining module instead",
            )
        )

    return changes

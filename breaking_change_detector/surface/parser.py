"""Extract the exported API surface from TypeScript-like source text.

This is a tolerant scanner, not a grammar. Declarations are located with
anchoring regexes and their bodies are delimited by bracket matching; any
declaration whose shape is not understood is skipped rather than failing the
whole parse.
"""

import logging
import re

from breaking_change_detector.surface.models import (
    ApiSurface,
    FunctionSignature,
    InterfaceDef,
    Parameter,
    PropertyDef,
    TypeAliasDef,
)
from breaking_change_detector.surface.scanner import (
    CONTINUATIONS,
    find_closing,
    find_top_level,
    line_number_at,
    mask_comments,
    read_type,
    split_top_level,
)

logger = logging.getLogger(__name__)

IDENTIFIER = r"[A-Za-z_$][\w$]*"

# export [declare] [async] function name
FUNCTION_PATTERN = re.compile(
    rf"(?<![\w$.])export\s+(?:declare\s+)?(async\s+)?"
    rf"function(?:\s*\*\s*|\s+)({IDENTIFIER})"
)

# export const name [: Type] = [async]
ARROW_PATTERN = re.compile(
    rf"(?<![\w$.])export\s+(?:const|let)\s+({IDENTIFIER})\s*(?::[^=]+)?=\s*(async\s+)?"
)

# export [declare] interface Name
INTERFACE_PATTERN = re.compile(
    rf"(?<![\w$.])export\s+(?:declare\s+)?interface\s+({IDENTIFIER})"
)

EXTENDS_PATTERN = re.compile(r"extends\s+")

# export [declare] type Name
TYPE_PATTERN = re.compile(rf"(?<![\w$.])export\s+(?:declare\s+)?type\s+({IDENTIFIER})")

# export [type] { a, b as c } [from '...']
EXPORT_CLAUSE_PATTERN = re.compile(r"(?<![\w$.])export\s+(?:type\s+)?\{([^{}]*)\}")

# [readonly] name[?]: type
MEMBER_PATTERN = re.compile(
    rf"^(?:readonly\s+)?({IDENTIFIER}|'[^']*'|\"[^\"]*\")(\?)?\s*:\s*(.+)$",
    re.DOTALL,
)

PARAM_NAME_PATTERN = re.compile(rf"^{IDENTIFIER}$")

SINGLE_PARAM_ARROW_PATTERN = re.compile(rf"({IDENTIFIER})\s*=>")


def parse_api_surface(source_text: str, file_path: str) -> ApiSurface:
    """Parse source text into its exported API surface.

    Args:
        source_text: The contents of one source file
        file_path: Path of the file, kept as provenance only

    Returns:
        ApiSurface with functions, interfaces, type aliases and re-exports in
        declaration order
    """
    code = mask_comments(source_text)

    functions = _parse_functions(code) + _parse_arrow_functions(code)
    functions.sort(key=lambda item: item[0])

    surface = ApiSurface(
        file_path=file_path,
        functions=_last_declaration_wins(f for _, f in functions),
        interfaces=_last_declaration_wins(_parse_interfaces(code)),
        types=_last_declaration_wins(_parse_type_aliases(code)),
        exports=_parse_export_clauses(code),
    )
    logger.info(
        f"Parsed {file_path}: {len(surface.functions)} functions, "
        f"{len(surface.interfaces)} interfaces, {len(surface.types)} types, "
        f"{len(surface.exports)} re-exports"
    )
    return surface


def _parse_functions(code: str) -> list[tuple[int, FunctionSignature]]:
    functions = []

    for match in FUNCTION_PATTERN.finditer(code):
        name = match.group(2)
        line_number = line_number_at(code, match.start())
        pos = _skip_generics(code, match.end())
        if pos is None or pos >= len(code) or code[pos] != "(":
            logger.debug(f"Skipping function {name} at line {line_number}")
            continue

        signature = _parse_signature(
            code, pos, name, bool(match.group(1)), line_number, stops="{;"
        )
        if signature is None:
            logger.debug(f"Skipping function {name} at line {line_number}")
            continue

        functions.append((match.start(), signature))
        logger.debug(f"Parsed function: {signature.format()}")

    return functions


def _parse_arrow_functions(code: str) -> list[tuple[int, FunctionSignature]]:
    functions = []

    for match in ARROW_PATTERN.finditer(code):
        name = match.group(1)
        is_async = bool(match.group(2))
        line_number = line_number_at(code, match.start())
        pos = match.end()

        single = SINGLE_PARAM_ARROW_PATTERN.match(code, pos)
        if single:
            # export const double = x => x * 2
            signature = FunctionSignature(
                name=name,
                params=(Parameter(single.group(1), False, "unknown", 0),),
                return_type="void",
                is_async=is_async,
                line_number=line_number,
            )
        else:
            pos = _skip_generics(code, pos)
            if pos is None or pos >= len(code) or code[pos] != "(":
                # A plain constant, not a function.
                continue
            signature = _parse_signature(
                code, pos, name, is_async, line_number, stops="="
            )
            if signature is None:
                logger.debug(f"Skipping arrow function {name} at line {line_number}")
                continue

        functions.append((match.start(), signature))
        logger.debug(f"Parsed arrow function: {signature.format()}")

    return functions


def _parse_signature(
    code: str,
    open_paren: int,
    name: str,
    is_async: bool,
    line_number: int,
    stops: str,
) -> FunctionSignature | None:
    """Parse ``(params)[: ReturnType]`` starting at the opening parenthesis."""
    close_paren = find_closing(code, open_paren)
    if close_paren is None:
        return None

    params = _parse_parameters(code[open_paren + 1 : close_paren])
    if params is None:
        return None

    return_type = "void"
    pos = _skip_whitespace(code, close_paren + 1)
    if pos < len(code) and code[pos] == ":":
        result = read_type(code, pos + 1, stops, soft_newline=True)
        if result is None or not result[0]:
            return None
        if stops == "=" and not code.startswith("=>", result[1]):
            return None
        return_type = result[0]
    elif stops == "=" and not code.startswith("=>", pos):
        # Parenthesised expression, not an arrow function.
        return None

    return FunctionSignature(
        name=name,
        params=params,
        return_type=return_type,
        is_async=is_async,
        line_number=line_number,
    )


def _parse_parameters(params_text: str) -> tuple[Parameter, ...] | None:
    params = []

    for raw in split_top_level(params_text, ","):
        param = _parse_parameter(raw, len(params))
        if param is None:
            return None
        if param.name == "this":
            # TypeScript's `this` annotation is not a real argument.
            continue
        params.append(param)

    return tuple(params)


def _parse_parameter(raw: str, position: int) -> Parameter | None:
    is_rest = raw.startswith("...")
    if is_rest:
        raw = raw[3:]

    default_at = find_top_level(raw, "=")
    has_default = default_at >= 0
    declaration = raw[:default_at] if has_default else raw

    colon_at = find_top_level(declaration, ":")
    if colon_at >= 0:
        name = declaration[:colon_at].strip()
        param_type = declaration[colon_at + 1 :].strip()
    else:
        name = declaration.strip()
        param_type = ""

    marked_optional = name.endswith("?")
    name = name.rstrip("?").strip()
    if not PARAM_NAME_PATTERN.match(name):
        # Destructuring patterns and other shapes we do not model.
        return None

    return Parameter(
        name=name,
        optional=marked_optional or has_default or is_rest,
        type=param_type or "unknown",
        position=position,
    )


def _parse_interfaces(code: str) -> list[InterfaceDef]:
    interfaces = []

    for match in INTERFACE_PATTERN.finditer(code):
        name = match.group(1)
        line_number = line_number_at(code, match.start())
        interface = _parse_interface(code, match.end(), name, line_number)
        if interface is None:
            logger.debug(f"Skipping interface {name} at line {line_number}")
            continue

        interfaces.append(interface)
        logger.debug(
            f"Parsed interface: {name} ({len(interface.properties)} properties)"
        )

    return interfaces


def _parse_interface(
    code: str, pos: int, name: str, line_number: int
) -> InterfaceDef | None:
    pos = _skip_generics(code, pos)
    if pos is None or pos >= len(code):
        return None

    extends: tuple[str, ...] = ()
    open_brace = pos
    if code[pos] != "{":
        match = EXTENDS_PATTERN.match(code, pos)
        if not match:
            return None
        result = read_type(code, match.end(), "{")
        if result is None or result[1] >= len(code) or code[result[1]] != "{":
            return None
        extends = tuple(split_top_level(result[0], ","))
        open_brace = result[1]

    close_brace = find_closing(code, open_brace)
    if close_brace is None:
        return None

    return InterfaceDef(
        name=name,
        extends=extends,
        properties=_parse_members(code[open_brace + 1 : close_brace]),
        line_number=line_number,
    )


def _parse_members(body: str) -> tuple[PropertyDef, ...]:
    properties = []

    for member in _join_continued(split_top_level(body, ";,\n")):
        match = MEMBER_PATTERN.match(member)
        if not match:
            # Methods, index signatures and call signatures.
            continue
        properties.append(
            PropertyDef(
                name=match.group(1).strip("'\""),
                optional=bool(match.group(2)),
                type=match.group(3).strip(),
            )
        )

    return tuple(properties)


def _join_continued(pieces: list[str]) -> list[str]:
    """Re-join member pieces split at line breaks inside a multi-line type."""
    members: list[str] = []
    for piece in pieces:
        if members and (
            piece.startswith(("|", "&", "=>"))
            or members[-1].endswith(CONTINUATIONS)
        ):
            members[-1] = f"{members[-1]} {piece}"
        else:
            members.append(piece)
    return members


def _parse_type_aliases(code: str) -> list[TypeAliasDef]:
    types = []

    for match in TYPE_PATTERN.finditer(code):
        name = match.group(1)
        line_number = line_number_at(code, match.start())
        pos = _skip_generics(code, match.end())
        if pos is None or pos >= len(code) or code[pos] != "=":
            logger.debug(f"Skipping type {name} at line {line_number}")
            continue

        result = read_type(code, pos + 1, ";", soft_newline=True)
        if result is None or not result[0]:
            logger.debug(f"Skipping type {name} at line {line_number}")
            continue

        types.append(
            TypeAliasDef(name=name, definition=result[0], line_number=line_number)
        )
        logger.debug(f"Parsed type: {name} = {result[0]}")

    return types


def _parse_export_clauses(code: str) -> tuple[str, ...]:
    names = []

    for match in EXPORT_CLAUSE_PATTERN.finditer(code):
        for item in match.group(1).split(","):
            item = item.strip()
            if item.startswith("type "):
                item = item[5:].strip()
            # Consumers import "b" from "export { a as b }"
            if " as " in item:
                item = item.split(" as ")[1].strip()
            if item and item not in names:
                names.append(item)

    return tuple(names)


def _skip_generics(code: str, pos: int) -> int | None:
    """Skip whitespace and an optional ``<...>`` generic parameter list."""
    pos = _skip_whitespace(code, pos)
    if pos < len(code) and code[pos] == "<":
        close = find_closing(code, pos)
        if close is None:
            return None
        pos = _skip_whitespace(code, close + 1)
    return pos


def _skip_whitespace(code: str, pos: int) -> int:
    while pos < len(code) and code[pos].isspace():
        pos += 1
    return pos


def _last_declaration_wins(declarations) -> tuple:
    latest = {}
    for declaration in declarations:
        latest.pop(declaration.name, None)
        latest[declaration.name] = declaration
    return tuple(latest.values())

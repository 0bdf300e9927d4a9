"""Bracket-aware text scanning helpers for the surface parser.

These are deliberately small: they track string literals and bracket depth,
nothing else. Anything they cannot balance is reported as ``None`` so the
caller can skip the declaration.
"""

OPENERS = "([{<"
CLOSERS = ")]}>"
QUOTES = "\"'`"
# A type ending with one of these still expects more type text.
CONTINUATIONS = ("|", "&", "=>", ":", ",", "?")


def mask_comments(text: str) -> str:
    """Blank out // and /* */ comments, keeping newlines and string literals.

    Offsets and line numbers of the remaining code are unchanged.
    """
    out = list(text)
    i = 0
    length = len(text)
    quote = None

    while i < length:
        char = text[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
            i += 1
        elif char in QUOTES:
            quote = char
            i += 1
        elif text.startswith("//", i):
            while i < length and text[i] != "\n":
                out[i] = " "
                i += 1
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = length if end == -1 else end + 2
            for j in range(i, end):
                if text[j] != "\n":
                    out[j] = " "
            i = end
        else:
            i += 1

    return "".join(out)


def find_closing(text: str, start: int) -> int | None:
    """Return the index of the bracket closing the one at ``text[start]``.

    Only the bracket pair found at ``start`` is counted; other bracket kinds
    and anything inside string literals are ignored.
    """
    opener = text[start]
    closer = CLOSERS[OPENERS.index(opener)]
    depth = 0
    quote = None
    i = start

    while i < len(text):
        char = text[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
        elif char == opener:
            depth += 1
        elif char == closer and not _is_arrow(text, i):
            depth -= 1
            if depth == 0:
                return i
        i += 1

    return None


def split_top_level(text: str, separators: str) -> list[str]:
    """Split on separator characters that sit outside brackets and strings.

    Empty pieces are dropped and the rest are stripped.
    """
    pieces = []
    current = ""
    depth = 0
    quote = None
    i = 0

    while i < len(text):
        char = text[i]
        if quote:
            current += char
            if char == "\\" and i + 1 < len(text):
                current += text[i + 1]
                i += 1
            elif char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
            current += char
        elif char in OPENERS:
            depth += 1
            current += char
        elif char in CLOSERS and not _is_arrow(text, i):
            depth = max(depth - 1, 0)
            current += char
        elif char in separators and depth == 0:
            if current.strip():
                pieces.append(current.strip())
            current = ""
        else:
            current += char
        i += 1

    if current.strip():
        pieces.append(current.strip())

    return pieces


def find_top_level(text: str, targets: str) -> int:
    """Index of the first target character outside brackets and strings, or -1."""
    depth = 0
    quote = None
    i = 0

    while i < len(text):
        char = text[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
        elif char in targets and depth == 0 and not _is_arrow(text, i):
            return i
        elif char in OPENERS:
            depth += 1
        elif char in CLOSERS and not _is_arrow(text, i):
            depth = max(depth - 1, 0)
        i += 1

    return -1


def read_type(
    text: str, start: int, stops: str, soft_newline: bool = False
) -> tuple[str, int] | None:
    """Read a type annotation starting at ``start``.

    Reading ends at a depth-0 character from ``stops`` or at an unmatched
    closing bracket. A ``{`` only ends the type when some type text has been
    read and that text does not expect a continuation, so object-literal
    types such as ``{ id: string }`` are read whole. With ``soft_newline``, a
    line break also ends a complete type unless the next line continues it
    (``| B``, ``& C``, ``? X : Y``).

    Returns:
        The stripped type text and the index where reading stopped
        (``len(text)`` when the text ran out), or ``None`` when a bracket or
        string literal inside the type is never closed
    """
    i = start
    while i < len(text):
        char = text[i]
        if char in stops or (soft_newline and char == "\n"):
            so_far = text[start:i].strip()
            if char == "\n":
                if _type_is_complete(so_far) and not _continues(text, i + 1):
                    return so_far, i
            elif char != "{" or _type_is_complete(so_far):
                return so_far, i
        if char in CLOSERS and not _is_arrow(text, i):
            return text[start:i].strip(), i
        if char in QUOTES:
            end = _skip_string(text, i)
            if end is None:
                return None
            i = end + 1
            continue
        if char in OPENERS:
            end = find_closing(text, i)
            if end is None:
                return None
            i = end + 1
            continue
        i += 1

    return text[start:].strip(), len(text)


def line_number_at(text: str, index: int) -> int:
    """1-based line number of ``index`` in ``text``."""
    return text.count("\n", 0, index) + 1


def _type_is_complete(so_far: str) -> bool:
    return bool(so_far) and not so_far.endswith(CONTINUATIONS)


def _continues(text: str, pos: int) -> bool:
    rest = text[pos:].lstrip()
    return rest.startswith(("|", "&", "?", ":", "=>"))


def _skip_string(text: str, start: int) -> int | None:
    quote = text[start]
    i = start + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i
        i += 1
    return None


def _is_arrow(text: str, index: int) -> bool:
    # Neither character of "=>" is a closing bracket or an assignment.
    if text[index] == ">":
        return index > 0 and text[index - 1] == "="
    if text[index] == "=":
        return index + 1 < len(text) and text[index + 1] == ">"
    return False

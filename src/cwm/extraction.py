"""
Line-level field extractors shared by the extraction strategies.

Every strategy scans the cleaned text on its own; these helpers only
know how to pull one field (a coordinate pair, a label offset, a
decorator group, ...) out of one line.

Extractors raise MapParseError when a recognised line is malformed.
Strategies catch it and turn it into a Diagnostic for that line.
"""

import re
from typing import Dict, Iterable, List, Optional, Set, Tuple

from cwm.model import (
    DEFAULT_MATURITY,
    DEFAULT_VISIBILITY,
    Decorators,
    ElementKind,
    LabelOffset,
    MapElement,
)


class MapParseError(Exception):
    """Raised when a line starts with a keyword but its payload is malformed."""
    pass


NUMBER_PATTERN = r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?"
_NUMBER_RE = re.compile(rf"^{NUMBER_PATTERN}$")

_LABEL_RE = re.compile(r"\blabel\s*\[([^\[\]]*)\]")
_URL_REF_RE = re.compile(r"\burl\s*\(\s*([^()]*?)\s*\)")
_PAREN_GROUP_RE = re.compile(r"\(([^()]*)\)")
_TRAILING_INERTIA_RE = re.compile(r"(?:^|\s)inertia\s*$")
_POSITION_RE = re.compile(r"^(?P<name>[^\[\]]*?)\s*\[(?P<coords>[^\[\]]*)\](?P<rest>.*)$")

DECORATOR_NAMES = ("ecosystem", "market", "buy", "build", "outsource")
_INERTIA = "inertia"

# Lines starting with one of these are never read as links.
RESERVED_KEYWORDS = (
    "title",
    "style",
    "size",
    "evolution",
    "note",
    "annotation",
    "annotations",
    "component",
    "market",
    "ecosystem",
    "anchor",
    "submap",
    "pipeline",
    "evolve",
    "url",
    "pioneers",
    "settlers",
    "townplanners",
    "accelerator",
    "deaccelerator",
    "build",
    "buy",
    "outsource",
)


def keyword_body(line: str, keyword: str) -> Optional[str]:
    """
    Return the text after `keyword` if the line is introduced by it.

    The keyword must be the whole line or be followed by whitespace, so
    `annotation` does not match `annotations [..]` and `build` does not
    match `build->X`.

    Returns:
        The stripped remainder, "" for a bare keyword, None otherwise
    """
    stripped = line.strip()
    if stripped == keyword:
        return ""
    if stripped.startswith(keyword) and stripped[len(keyword)].isspace():
        return stripped[len(keyword):].strip()
    return None


def starts_with_reserved_keyword(line: str) -> bool:
    return any(keyword_body(line, keyword) is not None for keyword in RESERVED_KEYWORDS)


def parse_number(token: str, what: str = "coordinate") -> float:
    """Parse one numeric token, raising MapParseError when it is not a number."""
    token = token.strip()
    if not _NUMBER_RE.match(token):
        raise MapParseError(f"Invalid {what} '{token}'")
    return float(token)


def parse_numbers(text: str, expected: Iterable[int], what: str = "coordinate") -> List[float]:
    """
    Parse a comma separated list of numbers of one of the expected lengths.

    Raises:
        MapParseError: On a wrong count or a non-numeric entry
    """
    expected = tuple(expected)
    parts = [part.strip() for part in text.split(",")]
    if parts == [""]:
        parts = []
    if len(parts) not in expected:
        counts = " or ".join(str(n) for n in expected)
        raise MapParseError(f"Expected {counts} values in [{text.strip()}], found {len(parts)}")
    return [parse_number(part, what) for part in parts]


def extract_label(body: str) -> Tuple[Optional[LabelOffset], str]:
    """Pull a `label [dx, dy]` clause out of the body."""
    m = _LABEL_RE.search(body)
    if m is None:
        return None, body
    x, y = parse_numbers(m.group(1), (2,), "label offset")
    return LabelOffset(x=x, y=y), (body[:m.start()] + " " + body[m.end():]).strip()


def extract_url_ref(body: str) -> Tuple[Optional[str], str]:
    """Pull a `url(name)` reference out of the body."""
    m = _URL_REF_RE.search(body)
    if m is None:
        return None, body
    return m.group(1) or None, (body[:m.start()] + " " + body[m.end():]).strip()


def extract_decorators(body: str) -> Tuple[Optional[Decorators], bool, str]:
    """
    Pull parenthesized decorator groups out of the body.

    A group is consumed only when every comma separated word in it is a
    decorator name or `inertia`, so `Compute (GPU)` keeps its parentheses.

    Returns:
        (decorators or None when none were written, inertia flag, remaining body)
    """
    decorators: Optional[Decorators] = None
    inertia = False

    def _consume(m: "re.Match[str]") -> str:
        nonlocal decorators, inertia
        words = [w.strip() for w in m.group(1).split(",") if w.strip()]
        if not words or any(w not in DECORATOR_NAMES and w != _INERTIA for w in words):
            return m.group(0)
        for word in words:
            if word == _INERTIA:
                inertia = True
                continue
            if decorators is None:
                decorators = Decorators()
            setattr(decorators, word, True)
        return " "

    remaining = _PAREN_GROUP_RE.sub(_consume, body)
    return decorators, inertia, " ".join(remaining.split())


def strip_trailing_inertia(text: str) -> Tuple[str, bool]:
    """Remove a trailing bare `inertia` word."""
    m = _TRAILING_INERTIA_RE.search(text)
    if m is None:
        return text, False
    return text[:m.start()].strip(), True


def split_position(body: str) -> Tuple[str, Optional[Tuple[float, float]], str]:
    """
    Split `Name [visibility, maturity] rest` into its parts.

    Returns:
        (name, (visibility, maturity) or None when no brackets, rest)

    Raises:
        MapParseError: On unbalanced brackets or bad coordinates
    """
    if "[" not in body and "]" not in body:
        return body.strip(), None, ""
    m = _POSITION_RE.match(body)
    if m is None:
        raise MapParseError("Unbalanced coordinate brackets")
    visibility, maturity = parse_numbers(m.group("coords"), (2,))
    return m.group("name").strip(), (visibility, maturity), m.group("rest").strip()


def parse_element(body: str, keyword: str, kind: ElementKind, line_number: int) -> MapElement:
    """
    Parse the body of a positioned element declaration.

    Grammar:
        Name [visibility, maturity] label [dx, dy] (decorators) inertia url(ref)

    Every clause except the name is optional. Without brackets the element
    sits at the sketch default (maturity 0.1, visibility 0.9). The first
    bracket group is always the position; `label` is only read after it.

    Raises:
        MapParseError: If the name is missing or a clause is malformed
    """
    url, body = extract_url_ref(body)
    decorators, inertia, body = extract_decorators(body)
    name, position, rest = split_position(body)
    label, rest = extract_label(rest)

    if position is None:
        name, trailing = strip_trailing_inertia(name)
        visibility, maturity = DEFAULT_VISIBILITY, DEFAULT_MATURITY
    else:
        _, trailing = strip_trailing_inertia(rest)
        visibility, maturity = position

    if not name:
        raise MapParseError(f"Missing {keyword} name")

    return MapElement(
        name=name,
        kind=kind,
        maturity=maturity,
        visibility=visibility,
        label=label or LabelOffset(),
        line=line_number,
        decorators=decorators,
        inertia=inertia or trailing,
        url=url,
    )


def find_pipeline_blocks(lines: List[str]) -> Dict[int, Tuple[int, int]]:
    """
    Locate the brace block following each `pipeline` header.

    The `{` may sit on the header line or on the next non-blank line. A
    block without `}` runs to the end of the input.

    Returns:
        header line index -> (open brace index, close brace index); the
        close index is len(lines) for an unterminated block
    """
    blocks: Dict[int, Tuple[int, int]] = {}
    index = 0
    while index < len(lines):
        if keyword_body(lines[index], "pipeline") is None:
            index += 1
            continue

        header = index
        if "{" in lines[header]:
            open_index = header
        else:
            open_index = header + 1
            while open_index < len(lines) and not lines[open_index].strip():
                open_index += 1
            if open_index >= len(lines) or not lines[open_index].strip().startswith("{"):
                index += 1
                continue

        close_index = open_index
        after_brace = lines[open_index].split("{", 1)[1]
        if "}" not in after_brace:
            close_index = open_index + 1
            while close_index < len(lines) and "}" not in lines[close_index]:
                close_index += 1

        blocks[header] = (open_index, close_index)
        index = close_index + 1
    return blocks


def pipeline_block_indexes(lines: List[str]) -> Set[int]:
    """Indexes of every line belonging to a pipeline brace block, braces included."""
    owned: Set[int] = set()
    for open_index, close_index in find_pipeline_blocks(lines).values():
        owned.update(range(open_index, min(close_index, len(lines) - 1) + 1))
    return owned


__all__ = [
    "MapParseError",
    "NUMBER_PATTERN",
    "RESERVED_KEYWORDS",
    "keyword_body",
    "starts_with_reserved_keyword",
    "parse_number",
    "parse_numbers",
    "extract_label",
    "extract_url_ref",
    "extract_decorators",
    "strip_trailing_inertia",
    "split_position",
    "parse_element",
    "find_pipeline_blocks",
    "pipeline_block_indexes",
]

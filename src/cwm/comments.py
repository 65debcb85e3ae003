"""
Comment eraser (first stage of the pipeline).

Removes `//` line comments and `/* ... */` block comments from map text
before any strategy sees it.

ARCHITECTURAL RULE:
    The number of lines never changes. Discarded lines become empty
    strings so that line numbers in diagnostics still point at the
    user's source.
"""

from typing import List, Tuple


_URL_KEYWORD = "url"


def _strip_line_comment(line: str) -> str:
    """Drop everything from the first `//`, except on url lines."""
    # Addresses legitimately contain `//`.
    if line.strip().startswith(_URL_KEYWORD):
        return line
    return line.split("//", 1)[0]


def _erase_blocks(line: str, in_block: bool) -> Tuple[str, bool]:
    """
    Remove block comment text from one line.

    Returns the kept text and whether a block is still open afterwards.
    A line that touches no delimiter is returned unchanged; otherwise
    the kept segments are trimmed and joined.
    """
    if not in_block and "/*" not in line:
        return line, False

    kept: List[str] = []
    rest = line
    while rest:
        if in_block:
            end = rest.find("*/")
            if end < 0:
                break
            in_block = False
            rest = rest[end + 2:]
        else:
            start = rest.find("/*")
            if start < 0:
                kept.append(rest)
                break
            kept.append(rest[:start])
            in_block = True
            rest = rest[start + 2:]

    text = " ".join(segment.strip() for segment in kept if segment.strip())
    return text, in_block


def strip_comments(text: str) -> str:
    """
    Remove comments from map source text.

    Rules, in order:
        1. Lines whose trimmed form starts with `url` keep any `//`.
        2. Elsewhere, text from the first `//` to end of line is removed.
        3. `/*` opens a block (prefix kept), `*/` closes it (suffix kept);
           lines inside a block become empty. An unterminated block
           silently consumes the rest of the input.

    Args:
        text: Raw map source

    Returns:
        Text with the same number of lines and comments removed
    """
    cleaned: List[str] = []
    in_block = False
    for line in text.split("\n"):
        line = _strip_line_comment(line)
        line, in_block = _erase_blocks(line, in_block)
        cleaned.append(line)
    return "\n".join(cleaned)


__all__ = ["strip_comments"]

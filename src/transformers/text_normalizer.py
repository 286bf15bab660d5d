"""
Whitespace normalization for externally authored description text.
"""

import re

# spaces/tabs (and the CR of a CRLF) directly before a newline
_LINE_END = re.compile(r"[ \t\r]+\n")
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


def normalize_description(text: str) -> str:
    """
    Normalize a description before rendering.

    - CRLF becomes LF
    - spaces/tabs at the end of a line are removed
    - three or more newlines collapse to one blank line
    - the whole text is trimmed

    Idempotent: normalize_description(normalize_description(x)) == normalize_description(x)
    """
    if not text:
        return ""
    text = _LINE_END.sub("\n", text)
    text = _EXTRA_BLANK_LINES.sub("\n\n", text)
    return text.strip()

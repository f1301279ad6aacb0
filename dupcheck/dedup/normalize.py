"""Normalization of test cases and scripts into comparable canonical text.

Test cases are joined field by field in a fixed order (title, description,
serialized steps, expected result) with single spaces, then lower-cased with
quotes dropped and whitespace collapsed. Callers must supply fields in that
order; no attempt is made to reconcile differently shaped input.

Scripts only lose comments and formatting. Identifiers, case and token order
are preserved. Comment syntax follows the file suffix: Python is tokenized so
`#` inside strings and `//` floor division survive; Ruby, YAML and Gherkin
drop `#` comments; everything else (JS, TS, Java, Kotlin, C#, Go) drops
`/* */` and `//` comments. Comment markers inside string literals of the
regex-based styles are stripped too (a known limit of the lexical pass).
"""
from __future__ import annotations

import io
import json
import re
import tokenize
from pathlib import PurePosixPath
from typing import Optional, Sequence

from dupcheck.dedup.fingerprint import fingerprint
from dupcheck.models import NormalizedContent, TestCaseContent, TestStep

_RE_WS = re.compile(r"\s+")
_RE_QUOTES = re.compile(r"['\"]")
_RE_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
# `//` not preceded by `:` so URLs such as http://host survive
_RE_LINE_COMMENT = re.compile(r"(?<!:)//[^\n]*")
# `#` at line start or after whitespace, so `#{interpolation}` survives
_RE_HASH_COMMENT = re.compile(r"(?:^|(?<=[ \t]))#[^\n]*", re.MULTILINE)

C_STYLE = "c"
HASH_STYLE = "hash"
PYTHON_STYLE = "python"

_SUFFIX_STYLES = {
    ".py": PYTHON_STYLE,
    ".rb": HASH_STYLE,
    ".feature": HASH_STYLE,
    ".yaml": HASH_STYLE,
    ".yml": HASH_STYLE,
}


def canonicalize_text(text: Optional[str]) -> str:
    """Lower-case, drop quotes, collapse whitespace and trim."""
    if not text:
        return ""
    t = text.lower()
    t = _RE_QUOTES.sub("", t)
    t = _RE_WS.sub(" ", t).strip()
    return t


def serialize_steps(steps: Sequence[TestStep]) -> str:
    """Compact JSON array of ``{"action", "expected"}`` objects."""
    return json.dumps(
        [step.to_dict() for step in steps],
        ensure_ascii=False,
        separators=(",", ":"),
    )


def join_test_case_fields(
    title: str,
    description: Optional[str],
    steps: Sequence[TestStep],
    expected_result: Optional[str],
) -> str:
    """Join test-case fields in canonical order, before canonicalization."""
    for step in steps:
        if not isinstance(step, TestStep):
            raise TypeError(
                f"steps must be TestStep instances, got {type(step).__name__}"
            )
    parts = [
        title or "",
        description or "",
        serialize_steps(steps),
        expected_result or "",
    ]
    return " ".join(parts)


def normalize_test_case(
    title: str,
    description: Optional[str],
    steps: Sequence[TestStep],
    expected_result: Optional[str],
) -> NormalizedContent:
    canonical = canonicalize_text(
        join_test_case_fields(title, description, steps, expected_result)
    )
    return NormalizedContent(canonical_text=canonical, content_hash=fingerprint(canonical))


def normalize_test_case_content(content: TestCaseContent) -> NormalizedContent:
    return normalize_test_case(
        content.title, content.description, content.steps, content.expected_result
    )


def normalize_text(content: str) -> NormalizedContent:
    """Normalize free-form test-case content already in serialized form."""
    canonical = canonicalize_text(content)
    return NormalizedContent(canonical_text=canonical, content_hash=fingerprint(canonical))


def comment_style(path: Optional[str]) -> str:
    """Comment syntax for a file path; C-style when unknown or absent."""
    if not path:
        return C_STYLE
    return _SUFFIX_STYLES.get(PurePosixPath(path).suffix.lower(), C_STYLE)


def _strip_python_comments(code: str) -> str:
    lines = io.StringIO(code).readlines()
    try:
        tokens = list(tokenize.generate_tokens(io.StringIO(code).readline))
    except (tokenize.TokenError, SyntaxError):
        # unparseable snippets fall back to the lexical pass
        return _RE_HASH_COMMENT.sub("", code)
    for tok in tokens:
        if tok.type == tokenize.COMMENT:
            row, col = tok.start
            line = lines[row - 1]
            lines[row - 1] = line[:col] + " " * (tok.end[1] - col) + line[tok.end[1]:]
    return "".join(lines)


def strip_code_comments(code: str, style: str = C_STYLE) -> str:
    if style == PYTHON_STYLE:
        return _strip_python_comments(code)
    if style == HASH_STYLE:
        return _RE_HASH_COMMENT.sub("", code)
    code = _RE_BLOCK_COMMENT.sub("", code)
    code = _RE_LINE_COMMENT.sub("", code)
    return code


def normalize_script(code: str, path: Optional[str] = None) -> NormalizedContent:
    """Strip comments and formatting from source code.

    ``path`` selects the comment syntax by suffix (see ``comment_style``).
    """
    if not code:
        canonical = ""
    else:
        canonical = _RE_WS.sub(" ", strip_code_comments(code, comment_style(path))).strip()
    return NormalizedContent(canonical_text=canonical, content_hash=fingerprint(canonical))

"""Syntax highlighting for ASC answer-sheet text.

Unlike the parser this tokenizer never fails: unknown characters become
``error`` tokens so an editor can colour them while the instructor types.
Concatenating the token values always reproduces the input.
"""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Any, Literal

from rich.text import Text

from quizdesk.core.asc_parser import MCQ_DIGITS

TokenType = Literal["prefix", "mcq", "frq", "frq-content", "error", "whitespace"]

RICH_STYLES: dict[str, str] = {
    "prefix": "dim",
    "mcq": "bold black on bright_cyan",
    "frq": "bold blue",
    "frq-content": "blue",
    "error": "bold white on red",
    "whitespace": "",
}


@dataclass
class ASCToken:
    """A highlighted span of ASC input."""

    type: TokenType
    value: str
    start: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"type": self.type, "value": self.value, "start": self.start}


def _matching_paren(text: str, start: int) -> int | None:
    """Index of the parenthesis closing the one at ``start``, if any."""
    depth = 0
    for j in range(start, len(text)):
        if text[j] == "(":
            depth += 1
        elif text[j] == ")":
            depth -= 1
            if depth == 0:
                return j
    return None


def tokenize_asc(text: str) -> list[ASCToken]:
    """Split ASC input into highlight tokens.

    Args:
        text: Raw, untrimmed editor contents

    Returns:
        Tokens covering the whole input in order.
    """
    if not text:
        return []

    colon = text.find(":")
    if colon == -1:
        return [ASCToken("error", text, 0)]

    tokens = [ASCToken("prefix", text[: colon + 1], 0)]
    base = colon + 1
    body = text[base:]

    i = 0
    while i < len(body):
        char = body[i]

        if char.isspace():
            tokens.append(ASCToken("whitespace", char, base + i))
            i += 1
            continue

        if char in MCQ_DIGITS:
            tokens.append(ASCToken("mcq", char, base + i))
            i += 1
            continue

        if char in ("F", "f"):
            tokens.append(ASCToken("frq", char, base + i))
            next_index = i + 1
            if next_index < len(body) and body[next_index] == "(":
                end = _matching_paren(body, next_index)
                if end is None:
                    # Unclosed group: the rest of the line is in error.
                    tokens.append(
                        ASCToken("error", body[next_index:], base + next_index)
                    )
                    break
                tokens.append(
                    ASCToken(
                        "frq-content", body[next_index : end + 1], base + next_index
                    )
                )
                i = end + 1
            else:
                i += 1
            continue

        # Invalid digits and unknown characters alike.
        tokens.append(ASCToken("error", char, base + i))
        i += 1

    return tokens


def render_html(tokens: list[ASCToken]) -> str:
    """Render tokens as HTML spans with ``asc-<type>`` classes."""
    return "".join(
        f'<span class="asc-{token.type}">{html.escape(token.value)}</span>'
        for token in tokens
    )


def render_rich(tokens: list[ASCToken]) -> Text:
    """Render tokens as a rich Text for terminal output."""
    text = Text()
    for token in tokens:
        text.append(token.value, style=RICH_STYLES[token.type])
    return text


def has_errors(tokens: list[ASCToken]) -> bool:
    """True when any token is highlighted as an error."""
    return any(token.type == "error" for token in tokens)

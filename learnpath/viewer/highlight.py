"""
Code highlighter - Syntax-class spans for embedded code samples.

Not a lexer: an ordered list of rules is tried at every cursor position and
the first rule that matches wins. Precedence:
1. Line comment (// to end of line)
2. Double-quoted string with backslash escapes
3. Annotation (@word)
4. Configured keyword (word boundaries)
5. Configured type name (word boundaries)

A keyword inside a comment or string is absorbed by the earlier span. Word
characters and word boundaries are ASCII only, so CJK text next to a keyword
still counts as a boundary.
"""

import html
import re
from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class TokenRule:
    """One highlighter alternative."""
    kind: str
    css_class: str
    pattern: re.Pattern


@dataclass(frozen=True)
class Token:
    """A run of source text; kind is None for plain text."""
    kind: Optional[str]
    text: str


COMMENT_RULE = TokenRule("comment", "hl-cm", re.compile(r"//[^\n]*"))
STRING_RULE = TokenRule("string", "hl-st", re.compile(r'"(?:[^"\\]|\\.)*"', re.DOTALL))
ANNOTATION_RULE = TokenRule("annotation", "hl-an", re.compile(r"@\w+", re.ASCII))


def _word_pattern(words: Iterable[str]) -> Optional[re.Pattern]:
    """Compile a word-boundary alternation, None for an empty vocabulary."""
    cleaned = [w for w in dict.fromkeys(words) if w]
    if not cleaned:
        return None
    return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in cleaned) + r")\b", re.ASCII)


class CodeTokenizer:
    """
    Highlighter compiled from a topic's keyword and type vocabularies.

    Stateless once built; the same instance can highlight any number of
    samples.
    """

    def __init__(
        self,
        keywords: Optional[Iterable[str]] = None,
        types: Optional[Iterable[str]] = None,
    ):
        self.rules: list[TokenRule] = [COMMENT_RULE, STRING_RULE, ANNOTATION_RULE]

        keyword_pattern = _word_pattern(keywords or [])
        if keyword_pattern:
            self.rules.append(TokenRule("keyword", "hl-kw", keyword_pattern))

        type_pattern = _word_pattern(types or [])
        if type_pattern:
            self.rules.append(TokenRule("type", "hl-ty", type_pattern))

    def tokenize(self, code: str) -> list[Token]:
        """Split code into highlighted tokens and plain runs."""
        tokens = []
        plain_start = 0
        pos = 0

        while pos < len(code):
            for rule in self.rules:
                match = rule.pattern.match(code, pos)
                if match and match.end() > pos:
                    if plain_start < pos:
                        tokens.append(Token(None, code[plain_start:pos]))
                    tokens.append(Token(rule.kind, match.group()))
                    pos = match.end()
                    plain_start = pos
                    break
            else:
                pos += 1

        if plain_start < len(code):
            tokens.append(Token(None, code[plain_start:]))
        return tokens

    def highlight(self, code: str) -> str:
        """
        Render code as HTML with hl-* class spans.

        Every piece of text is escaped for &, < and >; code with nothing to
        highlight comes back escaped and otherwise unchanged.
        """
        css_classes = {rule.kind: rule.css_class for rule in self.rules}
        result = []
        for token in self.tokenize(code):
            text = html.escape(token.text, quote=False)
            if token.kind is None:
                result.append(text)
            else:
                result.append(f'<span class="{css_classes[token.kind]}">{text}</span>')
        return "".join(result)


def code_block(code: str, tokenizer: CodeTokenizer) -> str:
    """Highlighted code wrapped for the page's code style."""
    return f'<div class="code-wrap"><code>{tokenizer.highlight(code)}</code></div>'


def escape_html_attr(s: str) -> str:
    """Escape text for use inside a double-quoted HTML attribute."""
    return html.escape(s, quote=False).replace('"', "&quot;")


def get_code_css() -> str:
    """Get CSS styles for highlighted code."""
    return """
    <style>
    .code-wrap {
        background: #1e1e2e;
        border-radius: 8px;
        padding: 1em 1.2em;
        margin: 1em 0;
        overflow-x: auto;
        font-family: "JetBrains Mono", "Fira Code", monospace;
        font-size: 0.9em;
        line-height: 1.6;
        white-space: pre;
        color: #cdd6f4;
    }
    .hl-cm { color: #7f849c; font-style: italic; }
    .hl-st { color: #a6e3a1; }
    .hl-an { color: #f9e2af; }
    .hl-kw { color: #cba6f7; font-weight: 600; }
    .hl-ty { color: #89b4fa; }
    </style>
    """

"""
Module: search.canonical

Purpose:
    Turn raw LaTeX problem source into (a) display text that a typesetting
    widget can show without choking on presentation-only commands, and
    (b) canonical text used only for matching.

    The ordered rule table DISPLAY_RULES is the contract. Rules run top to
    bottom, each exactly once; tests pin both the table order and the
    behaviour of the individual rules.

Key Functions:
    - to_display_and_canonical(): raw markup -> CanonicalText
    - to_display(): raw markup -> display text
    - canonicalize(): any text -> search-canonical text (idempotent)
    - to_safe_html(): display text -> escaped HTML with question-number spans

Dependencies:
    - re (std)
    - unicodedata (std): NFKC compatibility normalization
    - html (std): escaping

Used By:
    - search.content_store: body text derivation
    - search.query: term and metadata canonicalization
    - gui.widgets.problem_card: safe HTML body
"""

from __future__ import annotations

import html
import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Callable, Tuple, Union

logger = logging.getLogger(__name__)

# The only construct that survives escaping as real markup.
QNUM_PATTERN = re.compile(r"\[\[QNUM:(\d+)\]\]")
QNUM_HTML = r'<span class="qnum">\1</span>'

# canonicalize() is a fixpoint loop; a handful of passes always suffices.
MAX_CANONICAL_PASSES = 8

_WHITESPACE = re.compile(r"\s+")
_BRACED_SCRIPT = re.compile(r"([\^_])\{([^{}]*)\}")

Replacement = Union[str, Callable[[re.Match], str]]


@dataclass(frozen=True)
class CanonicalRule:
    """
    One display-normalization rule.

    Attributes:
        name: Stable identifier used in tests and debug logs
        pattern: Compiled regex
        replacement: re.sub replacement (string template or callable)
        rationale: Why the construct is rewritten
        count: Max substitutions (0 = all)
    """
    name: str
    pattern: re.Pattern
    replacement: Replacement
    rationale: str
    count: int = 0

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text, count=self.count)


def _rule(name: str, pattern: str, replacement: Replacement, rationale: str,
          flags: int = 0, count: int = 0) -> CanonicalRule:
    return CanonicalRule(name, re.compile(pattern, flags), replacement, rationale, count)


_SIZE_SWITCHES = r"tiny|scriptsize|footnotesize|small|normalsize|large|Large|LARGE|huge|Huge"
_GEOMETRY = (
    r"textwidth|textheight|oddsidemargin|evensidemargin|topmargin|"
    r"headheight|headsep|footskip"
)

DISPLAY_RULES: Tuple[CanonicalRule, ...] = (
    # ── Line structure first: later rules anchor on \n and ASCII spaces ──
    _rule("line_endings", r"\r\n?", "\n", "normalize line endings"),
    _rule("ideographic_space", "\u3000+", " ", "full-width spaces collapse to one space"),

    # ── Full-document scaffolding ────────────────────────────────────────
    _rule("preamble", r"^.*?\\begin\{document\}", "",
          "only the content region survives", re.DOTALL, count=1),
    _rule("trailer", r"\\end\{document\}.*$", "",
          "only the content region survives", re.DOTALL, count=1),
    _rule("documentclass", r"\\documentclass(?:\[[^\]]*\])?\{[^}]*\}", "",
          "stray preamble declaration"),
    _rule("usepackage", r"\\usepackage(?:\[[^\]]*\])?\{[^}]*\}", "",
          "stray preamble declaration"),
    _rule("pagestyle", r"\\pagestyle\{[^}]+\}", "",
          "page furniture has no content"),

    # ── Lengths and geometry ─────────────────────────────────────────────
    _rule("setlength", r"\\setlength\s*\{[^}]+\}\s*\{[^}]*\}\s*", "",
          "length settings leak into displayed text"),
    _rule("addtolength", r"\\addtolength\s*\{[^}]+\}\s*\{[^}]*\}\s*", "",
          "length settings leak into displayed text"),
    _rule("geometry", rf"\\(?:{_GEOMETRY})\s*=?\s*[^\\\n]*", "",
          "raw geometry assignments leak into displayed text"),

    # ── Spacing and breaks ───────────────────────────────────────────────
    _rule("hspace", r"\\hspace\*?\{[^}]*\}", "", "spacing only"),
    _rule("vspace", r"\\vspace\*?\{[^}]*\}", "", "spacing only"),
    _rule("skips", r"\\(?:smallskip|medskip|bigskip)\b", "", "spacing only"),
    _rule("paragraph", r"\\(?:noindent|par|indent)\b", "\n",
          "paragraph control becomes a line break"),
    _rule("page_break", r"\\(?:newpage|clearpage|pagebreak|linebreak)\b(?:\[[^\]]*\])?", "\n",
          "page control becomes a line break"),
    _rule("quads", r"\\(?:qquad|quad)\b", " ", "horizontal space becomes one space"),
    _rule("thin_space", r"\\,", " ", "horizontal space becomes one space"),

    # ── External files and references ────────────────────────────────────
    _rule("includegraphics", r"\\includegraphics(?:\[[^\]]*\])?\{[^}]*\}", "",
          "images are not shipped with the source"),
    _rule("input", r"\\input\{[^}]*\}", "", "external files are not fetched"),
    _rule("include", r"\\include\{[^}]*\}", "", "external files are not fetched"),
    _rule("bibliography", r"\\bibliography\{[^}]*\}", "", "no bibliography support"),
    _rule("bibliographystyle", r"\\bibliographystyle\{[^}]*\}", "", "no bibliography support"),

    # ── Non-renderable environments ──────────────────────────────────────
    _rule("graphics_env",
          r"\\begin\{(tikzpicture|picture|pspicture|circuitikz)\}.*?\\end\{\1\}", "",
          "vector graphics cannot be typeset by the viewer", re.DOTALL),

    # ── Boxes, colour, cross references ──────────────────────────────────
    _rule("raisebox", r"\\raisebox\{[^}]*\}\{[^}]*\}", "", "positioning only"),
    _rule("phantom", r"\\(?:phantom|hphantom|vphantom)\{[^}]*\}", "", "invisible spacing"),
    _rule("textcolor", r"\\textcolor\{[^}]*\}\{([^}]*)\}", r"\1", "keep coloured text, drop colour"),
    _rule("color", r"\\color\{[^}]*\}", "", "colour only"),
    _rule("label", r"\\label\{[^}]*\}", "", "no cross references"),
    _rule("ref", r"\\ref\{[^}]*\}", "", "no cross references"),
    _rule("cite", r"\\cite\{[^}]*\}", "", "no cross references"),

    # ── Question numbers (before size switches so {\huge 4} is still intact)
    _rule("qnum_line", r"^[ \t]*\{(\d+)\}[ \t]*$", r"[[QNUM:\1]]",
          "a lone braced integer is the question number", re.MULTILINE),
    _rule("qnum_sized", r"\{\s*\\(?:huge|Huge|LARGE|Large|large)\s+(\d+)\s*\}", r"[[QNUM:\1]]",
          "a large braced integer is the question number"),

    # ── Font sizes and layout environments ───────────────────────────────
    _rule("size_switch", rf"\\(?:{_SIZE_SWITCHES})\b", "", "font size only"),
    _rule("layout_begin", r"\\begin\{(?:flushleft|center|flushright)\}", "", "alignment only"),
    _rule("layout_end", r"\\end\{(?:flushleft|center|flushright)\}", "", "alignment only"),
    _rule("list_begin", r"\\begin\{(?:description|itemize|enumerate)\}", "\n",
          "lists become plain lines"),
    _rule("list_end", r"\\end\{(?:description|itemize|enumerate)\}", "\n",
          "lists become plain lines"),

    # ── List items ───────────────────────────────────────────────────────
    _rule("item_paren_label", r"\\item\s*\[\s*\(([^)]+)\)\s*\]\s*", "\n（\\1） ",
          "sub-question label such as (i) or (2)"),
    _rule("item_label", r"\\item\s*\[\s*([^\]]+?)\s*\]\s*", "\n\\1： ",
          "described item keeps its label"),
    _rule("item_bullet", r"\\item\b\s*", "\n・ ", "plain item becomes a bullet line"),

    # ── Whitespace ───────────────────────────────────────────────────────
    _rule("trailing_space", r"[ \t]+\n", "\n", "blank lines must be empty to collapse"),
    _rule("blank_lines", r"\n{3,}", "\n\n", "at most one blank line"),
)


@dataclass(frozen=True)
class CanonicalText:
    """
    Derived body text of a record.

    Attributes:
        display: Sanitized, human-readable text (may contain QNUM markers)
        canonical: Whitespace-free, case/width-folded text for matching
    """
    display: str
    canonical: str


def to_display(raw: str) -> str:
    """
    Apply DISPLAY_RULES to raw markup.

    Never raises: a rule that fails is logged and skipped so the remaining
    rules still run.

    Example:
        >>> to_display("\\\\vspace{2mm}\\\\item[(i)] x")
        '（i） x'
    """
    text = raw if isinstance(raw, str) else ("" if raw is None else str(raw))
    for rule in DISPLAY_RULES:
        try:
            text = rule.apply(text)
        except (re.error, RecursionError) as e:
            logger.debug(f"Rule {rule.name} skipped: {e}")
    return text.strip()


def _canonical_pass(text: str) -> str:
    text = unicodedata.normalize("NFKC", text)
    text = text.casefold()
    text = unicodedata.normalize("NFKC", text)
    text = _WHITESPACE.sub("", text)
    prev = None
    while prev != text:
        prev = text
        text = _BRACED_SCRIPT.sub(r"\1\2", text)
    return text


def canonicalize(text: str) -> str:
    """
    Search-canonical form of any text.

    NFKC compatibility normalization, case folding, all whitespace removed,
    and ``^{x}`` / ``_{x}`` rewritten to ``^x`` / ``_x`` so that either
    spelling of an exponent or subscript matches the other.

    Idempotent: canonicalize(canonicalize(s)) == canonicalize(s).

    Example:
        >>> canonicalize("Ｎ^{2} + 1")
        'n^2+1'
    """
    if not text:
        return ""
    current = str(text)
    for _ in range(MAX_CANONICAL_PASSES):
        nxt = _canonical_pass(current)
        if nxt == current:
            return nxt
        current = nxt
    return current


def to_display_and_canonical(raw: str) -> CanonicalText:
    """
    Derive both body strings from raw markup in one step.

    Question-number markers are unwrapped to their bare number in the
    canonical form so that the marker token itself is never searchable.
    """
    display = to_display(raw)
    canonical = canonicalize(QNUM_PATTERN.sub(r"\1", display))
    return CanonicalText(display=display, canonical=canonical)


def to_safe_html(display: str) -> str:
    """
    Escape display text for rich-text widgets, then re-expose QNUM markers.

    Escaping must happen first: restoring first would escape the restored
    span again.

    Example:
        >>> to_safe_html("[[QNUM:2]] a<b")
        '<span class="qnum">2</span> a&lt;b'
    """
    escaped = html.escape(display or "", quote=True)
    return QNUM_PATTERN.sub(QNUM_HTML, escaped)

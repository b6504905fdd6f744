"""HTML → Markdown conversion and the cleaning pass applied to every page.

``to_markdown`` converts with markdownify plus a few house rules;
``clean`` turns converted Markdown into the cached document: a provenance
header followed by the body after a fixed, ordered sequence of textual
cleanups.  The order matters: later rules expect earlier ones to have removed
empty anchors and the empty headings they leave behind.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional

from bs4 import Tag
from markdownify import ATX, MarkdownConverter

from docs_cache.cache.writer import utc_timestamp
from docs_cache.config import settings

_LANGUAGE_CLASS = re.compile(r"^(?:language|lang|highlight-source|highlight)-([\w+#.-]+)$")

# Fenced blocks are kept verbatim by every textual rule below.
_FENCE_BLOCK = re.compile(r"(^[ \t]*(```|~~~)[^\n]*\n.*?^[ \t]*\2[ \t]*$)", re.MULTILINE | re.DOTALL)

_PROVENANCE_HEADER = re.compile(
    r"\A\s*#[^\n]*\n+> Source: [^\n]*\n> Fetched: [^\n]*\n+---[ \t]*\n+"
)

_BOILERPLATE_LINES = {
    "skip to main content",
    "skip to content",
    "search...",
    "search…",
    "search",
    "navigation",
    "on this page",
    "ctrl k",
    "ctrl+k",
    "⌘k",
    "copy page",
    "was this page helpful?",
    "yesno",
}

_ZERO_WIDTH = re.compile("[\u200b\u200c\u200d\ufeff]")


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

def _sniff_language(el: Tag) -> str:
    """Best-effort language tag from ``<pre>``/``<code>`` class names."""
    candidates: List[Tag] = [el]
    code = el.find("code")
    if code is not None:
        candidates.append(code)
    for node in candidates:
        classes = node.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        for cls in classes:
            match = _LANGUAGE_CLASS.match(cls)
            if match:
                return match.group(1).lower()
        lang = node.get("data-language")
        if isinstance(lang, str) and lang:
            return lang.lower()
    return ""


class DocsMarkdownConverter(MarkdownConverter):
    """markdownify converter with the docs-cache house rules.

    * navigation chrome renders as nothing, in case extraction missed some;
    * links without visible text are dropped entirely.
    """

    def convert_nav(self, el, text, *args, **kwargs):
        return ""

    convert_footer = convert_nav
    convert_aside = convert_nav

    def convert_a(self, el, text, *args, **kwargs):
        if not _ZERO_WIDTH.sub("", text or "").strip():
            return ""
        return super().convert_a(el, text, *args, **kwargs)


def to_markdown(html: str) -> str:
    """Convert an HTML fragment or document to Markdown."""
    converter = DocsMarkdownConverter(
        heading_style=ATX,
        bullets="-",
        code_language_callback=_sniff_language,
        strong_em_symbol="*",
        escape_underscores=False,
        escape_asterisks=False,
    )
    return converter.convert(html)


# ---------------------------------------------------------------------------
# Cleaning rules (applied in this exact order)
# ---------------------------------------------------------------------------

def _remove_anchor_links(text: str) -> str:
    text = re.sub(r"\[Skip to (?:main )?content\]\([^)]*\)", "", text, flags=re.IGNORECASE)
    return re.sub(
        r"(?<!!)\[([^\]]*)\]\(#[^)]*\)",
        lambda m: _ZERO_WIDTH.sub("", m.group(1)).strip(),
        text,
    )


def _remove_decorative_images(text: str) -> str:
    decorative = r"[^\]\n]*(?:logo|icon|flag)[^\]\n]*"
    image = rf"!\[(?:{decorative})\]\([^)\n]*\)|!\[[^\]\n]*\]\([^)\n]*(?:logo|icon|flag)[^)\n]*\)"
    text = re.sub(rf"\[(?:{image})\]\([^)\n]*\)", "", text, flags=re.IGNORECASE)
    return re.sub(image, "", text, flags=re.IGNORECASE)


def _collapse_blank_lines(text: str) -> str:
    text = re.sub(r"^[ \t]+$", "", text, flags=re.MULTILINE)
    return re.sub(r"\n{4,}", "\n\n\n", text)


def _remove_empty_headings(text: str) -> str:
    return re.sub(r"^#{1,6}[ \t]*$\n?", "", text, flags=re.MULTILINE)


def _remove_empty_bullets(text: str) -> str:
    return re.sub(r"^[ \t]*[-*+][ \t]*$\n?", "", text, flags=re.MULTILINE)


def _collapse_empty_links(text: str) -> str:
    text = re.sub(r"\[([^\]\n]+)\]\(\s*\)", r"\1", text)
    return re.sub(r"(?<!!)\[\s*\]\([^)\n]*\)", "", text)


def _tighten_inline_code(text: str) -> str:
    return re.sub(r"(?<!`)`[ \t]*([^`\n]*?[^`\s])[ \t]*`(?!`)", r"`\1`", text)


def _remove_boilerplate(text: str) -> str:
    lines = [
        line for line in text.split("\n")
        if line.strip().lower() not in _BOILERPLATE_LINES
    ]
    return "\n".join(lines)


def _remove_glyph_lines(text: str) -> str:
    return re.sub(r"^[ \t]*[•·▪◦●★☆✦]+(?:[ \t]+[•·▪◦●★☆✦]+)*[ \t]*$\n?", "", text, flags=re.MULTILINE)


def _normalize_rules(text: str) -> str:
    return re.sub(r"^[ \t]*([-*_])(?:[ \t]*\1){2,}[ \t]*$", "---", text, flags=re.MULTILINE)


def _trim_trailing_whitespace(text: str) -> str:
    return re.sub(r"[ \t]+$", "", text, flags=re.MULTILINE)


CLEANUP_RULES: List[Callable[[str], str]] = [
    _remove_anchor_links,
    _remove_decorative_images,
    _collapse_blank_lines,
    _remove_empty_headings,
    _remove_empty_bullets,
    _collapse_empty_links,
    _tighten_inline_code,
    _remove_boilerplate,
    _remove_glyph_lines,
    _normalize_rules,
    _trim_trailing_whitespace,
]


def split_fenced(text: str) -> List[str]:
    """Split *text* into alternating prose / fenced-code segments.

    Even indexes are prose, odd indexes are complete fenced blocks.
    """
    parts = _FENCE_BLOCK.split(text)
    # re.split also returns the inner fence-marker group; drop it.
    segments: List[str] = []
    i = 0
    while i < len(parts):
        segments.append(parts[i])
        if i + 1 < len(parts):
            segments.append(parts[i + 1])
        i += 3
    return segments


def map_prose(text: str, fn: Callable[[str], str]) -> str:
    """Apply *fn* to every non-code segment of *text*."""
    segments = split_fenced(text)
    return "".join(fn(seg) if i % 2 == 0 else seg for i, seg in enumerate(segments))


def clean_title(title: str) -> str:
    """Strip the product branding suffix (e.g. ``" - Claude Code Docs"``)."""
    cleaned = re.sub(settings.title_suffix_pattern, "", title or "").strip()
    return cleaned or (title or "").strip()


def provenance_header(title: str, source_url: str, generated_at: str) -> str:
    return f"# {title}\n\n> Source: {source_url}\n> Fetched: {generated_at}\n\n---\n\n"


def clean(
    markdown: str,
    title: str,
    source_url: str,
    generated_at: Optional[str] = None,
) -> str:
    """Produce the final cached document from converted Markdown.

    A provenance header already present at the top (from an earlier pass) is
    replaced rather than duplicated, so ``clean`` is idempotent apart from the
    timestamp.
    """
    if generated_at is None:
        generated_at = utc_timestamp()

    body = _PROVENANCE_HEADER.sub("", markdown, count=1)
    for rule in CLEANUP_RULES:
        body = map_prose(body, rule)
    # Leading blank lines are trimmed on the whole body, not per segment.
    body = body.strip("\n")

    header = provenance_header(clean_title(title), source_url, generated_at)
    return header + body + "\n"

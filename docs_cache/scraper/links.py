"""Link rewriting and provenance insertion for Markdown fetched as-is."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urljoin, urlsplit

from docs_cache.scraper.markdown import map_prose, split_fenced

RAW_GITHUB_HOST = "raw.githubusercontent.com"

# ``[text](target "title")`` and ``![alt](target)``; the target is group 3.
# A label may hold one image, as in ``[![badge](b.svg)](target)``.
_INLINE_LINK = re.compile(
    r"(!?)(\[(?:[^\[\]\n]|!\[[^\]\n]*\]\([^)\n]*\))*\])\(\s*([^)\s]+)((?:\s+\"[^\"]*\")?\s*)\)"
)
_CODE_SPAN = re.compile(r"(`+)(?!`).*?(?<!`)\1(?!`)")
# ``[id]: target`` reference definitions.
_REFERENCE_DEF = re.compile(r"^([ \t]{0,3}\[[^\]\n]+\]:[ \t]*)(\S+)", re.MULTILINE)

_HEADING = re.compile(r"^#{1,6}[ \t]+\S", re.MULTILINE)

_ABSOLUTE = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|//|#)")


def is_relative(target: str) -> bool:
    """``True`` for targets that need anchoring (not absolute, not a fragment)."""
    return bool(target) and not _ABSOLUTE.match(target)


def _github_equivalent(raw_url: str, *, directory: bool) -> str:
    """Map a raw.githubusercontent.com URL to its browsable github.com page."""
    parts = urlsplit(raw_url)
    segments = parts.path.lstrip("/").split("/", 3)
    if len(segments) < 3:
        return raw_url
    org, repo, ref = segments[:3]
    rest = segments[3] if len(segments) > 3 else ""
    kind = "tree" if directory or not rest else "blob"
    url = f"https://github.com/{org}/{repo}/{kind}/{ref}"
    if rest:
        url = f"{url}/{rest}"
    if parts.fragment:
        url = f"{url}#{parts.fragment}"
    return url


def absolutize(target: str, source_url: str, *, image: bool = False) -> str:
    """Resolve *target* against *source_url*.

    Links found in files served from raw GitHub hosting point at the matching
    ``github.com`` ``blob`` (files) or ``tree`` (directories) page.  Images
    keep the raw URL so they still render.
    """
    if not is_relative(target):
        return target

    host = urlsplit(source_url).netloc.lower()
    if host == RAW_GITHUB_HOST:
        # Root-relative links are relative to the repository root at that ref.
        if target.startswith("/"):
            segments = urlsplit(source_url).path.lstrip("/").split("/")
            repo_root = f"https://{RAW_GITHUB_HOST}/" + "/".join(segments[:3]) + "/"
            resolved = urljoin(repo_root, target.lstrip("/"))
        else:
            resolved = urljoin(source_url, target)
        if image:
            return resolved
        return _github_equivalent(resolved, directory=target.split("#", 1)[0].endswith("/"))

    return urljoin(source_url, target)


def rewrite_relative_links(markdown: str, source_url: str) -> str:
    """Rewrite every relative link target in *markdown* to an absolute URL.

    Fenced code blocks are left alone; nothing else about the text changes.
    """

    def _inline(match: re.Match) -> str:
        bang, label, target, tail = match.groups()
        label = _INLINE_LINK.sub(_inline, label)
        return f"{bang}{label}({absolutize(target, source_url, image=bool(bang))}{tail})"

    def _reference(match: re.Match) -> str:
        prefix, target = match.groups()
        return f"{prefix}{absolutize(target, source_url)}"

    def _rewrite(segment: str) -> str:
        # Inline code spans are copied through untouched.
        pieces = []
        pos = 0
        for span in _CODE_SPAN.finditer(segment):
            pieces.append(_INLINE_LINK.sub(_inline, segment[pos:span.start()]))
            pieces.append(span.group(0))
            pos = span.end()
        pieces.append(_INLINE_LINK.sub(_inline, segment[pos:]))
        return _REFERENCE_DEF.sub(_reference, "".join(pieces))

    return map_prose(markdown, _rewrite)


def provenance_block(source_url: str, generated_at: str) -> str:
    return f"> Source: {source_url}\n> Fetched: {generated_at}"


def insert_provenance(markdown: str, source_url: str, generated_at: str) -> str:
    """Insert the provenance block after the first heading, or at the top."""
    block = provenance_block(source_url, generated_at)
    match: Optional[re.Match] = None
    offset = 0
    for i, segment in enumerate(split_fenced(markdown)):
        if i % 2 == 0:
            match = _HEADING.search(segment)
            if match:
                break
        offset += len(segment)
    if match is None:
        return f"{block}\n\n{markdown}"

    line_end = markdown.find("\n", offset + match.start())
    if line_end == -1:
        return f"{markdown}\n\n{block}\n"
    head, tail = markdown[: line_end + 1], markdown[line_end + 1:]
    if not tail.startswith("\n"):
        tail = "\n" + tail
    return f"{head}\n{block}\n{tail}"

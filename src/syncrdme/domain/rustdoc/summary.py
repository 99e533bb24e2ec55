"""Crate-level documentation rewritten for embedding in a README.

The docs are edited line by line from markdown-it token maps, so whatever
the transform does not touch keeps its original spelling.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from markdown_it import MarkdownIt
from markdown_it.common.utils import normalizeReference
from markdown_it.token import Token

from syncrdme.domain.readme.events import markdown_parser
from syncrdme.domain.readme.interpolate import splice
from syncrdme.domain.readme.span import Span, line_span, line_starts

from .links import LinkResolver
from .model import DocTree, RustdocOutputError

MAX_HEADING_LEVEL = 6
ATTRIBUTE_TAGS = {"", "ignore", "should_panic", "no_run", "compile_fail"}

_BREAK_AT_END = re.compile(r"(\r\n?|\n)\Z")
_ATX_OPEN = re.compile(r"^( {0,3})(#{1,6})(?=[ \t]|$)")
_FENCE_OPEN = re.compile(r"^(\s*)(`{3,}|~{3,})(.*)$")
_EDITION_TAG = re.compile(r"edition\d{4}")
_CODE_SPAN = re.compile(r"(?<!`)(`+)(?!`).*?(?<!`)\1(?!`)", re.DOTALL)


@dataclass
class Summary:
    text: str
    warnings: List[str] = field(default_factory=list)


def _split_break(line: str) -> Tuple[str, str]:
    match = _BREAK_AT_END.search(line)
    if match is None:
        return line, ""
    return line[: match.start()], match.group(1)


def _lines(text: str, starts: List[int], first: int, last: int) -> List[str]:
    return [line_span(starts, index, index + 1).slice(text) for index in range(first, last)]


def is_attribute_tag(tag: str) -> bool:
    return tag in ATTRIBUTE_TAGS or bool(_EDITION_TAG.fullmatch(tag))


def codeblock_tag(info: str) -> Tuple[str, bool]:
    """Return the fence info string to emit and whether the block is Rust."""

    tags = [tag.strip() for tag in info.split(",")]
    languages = [tag for tag in tags if not is_attribute_tag(tag)]
    if any(tag != "rust" for tag in languages):
        return info, False
    if languages:
        return info, True
    return ("rust" if not info.strip() else f"rust,{info.strip()}"), True


def strip_hidden_lines(lines: Iterable[str]) -> List[str]:
    """Drop rustdoc's hidden ``# `` lines and unescape ``##``."""

    kept: List[str] = []
    for line in lines:
        body, brk = _split_break(line)
        stripped = body.lstrip()
        indent = body[: len(body) - len(stripped)]
        if stripped == "#" or stripped.startswith("# "):
            continue
        if stripped.startswith("##"):
            body = indent + stripped[1:]
        kept.append(body + brk)
    return kept


def _dedent_indented(line: str) -> str:
    body, brk = _split_break(line)
    if body.startswith("    "):
        return body[4:] + brk
    if body.startswith("\t"):
        return body[1:] + brk
    return body.lstrip(" ") + brk


def _heading_edit(token: Token, inline: Optional[Token], text: str, starts: List[int]) -> Optional[Tuple[str, Span]]:
    first, last = token.map
    span = line_span(starts, first, last)
    if token.markup.startswith("#"):
        line = span.slice(text)
        match = _ATX_OPEN.match(line)
        if match is None or len(match.group(2)) >= MAX_HEADING_LEVEL:
            return None
        return line[: match.start(2)] + "#" + line[match.start(2) :], span
    level = 1 if token.markup.startswith("=") else 2
    _, brk = _split_break(span.slice(text))
    content = " ".join(part.strip() for part in (inline.content if inline else "").splitlines())
    return "#" * (level + 1) + " " + content + (brk or "\n"), span


def _fence_edit(token: Token, text: str, starts: List[int]) -> Optional[Tuple[str, Span]]:
    first, last = token.map
    lines = _lines(text, starts, first, last)
    opening, brk = _split_break(lines[0])
    match = _FENCE_OPEN.match(opening)
    if match is None:
        return None
    indent, markup, info = match.groups()
    tag, is_rust = codeblock_tag(info.strip())
    if not is_rust:
        return None

    closing = re.compile(r"^\s{0,3}" + re.escape(markup[0]) + "{" + str(len(markup)) + r",}\s*$")
    body = lines[1:]
    tail: List[str] = []
    if body and closing.match(_split_break(body[-1])[0]):
        tail = [body.pop()]
    rebuilt = [f"{indent}{markup}{tag}{brk}"] + strip_hidden_lines(body) + tail
    return "".join(rebuilt), line_span(starts, first, last)


def _indented_edit(token: Token, text: str, starts: List[int]) -> Tuple[str, Span]:
    first, last = token.map
    lines = _lines(text, starts, first, last)
    _, brk = _split_break(lines[-1]) if lines else ("", "\n")
    brk = brk or "\n"
    body = strip_hidden_lines(_dedent_indented(line) for line in lines)
    if body and not _split_break(body[-1])[1]:
        body[-1] += brk
    return "```rust\n" + "".join(body) + "```" + brk, line_span(starts, first, last)


def transform_blocks(text: str, parser: Optional[MarkdownIt] = None) -> str:
    """Demote headings one level and normalise Rust code blocks."""

    md = parser or markdown_parser()
    tokens = md.parse(text)
    starts = line_starts(text)
    edits: List[Tuple[str, Span]] = []
    quote_depth = 0
    for position, token in enumerate(tokens):
        if token.type == "blockquote_open":
            quote_depth += 1
        elif token.type == "blockquote_close":
            quote_depth -= 1
        if token.map is None or quote_depth:
            continue
        edit: Optional[Tuple[str, Span]] = None
        if token.type == "heading_open":
            inline = tokens[position + 1] if position + 1 < len(tokens) else None
            edit = _heading_edit(token, inline, text, starts)
        elif token.type == "fence":
            edit = _fence_edit(token, text, starts)
        elif token.type == "code_block" and token.level == 0:
            edit = _indented_edit(token, text, starts)
        if edit is not None:
            edits.append(edit)
    return splice(text, edits)


def _merge_ranges(ranges: Iterable[Tuple[int, int]]) -> List[Tuple[int, int]]:
    merged: List[Tuple[int, int]] = []
    for first, last in sorted(ranges):
        if merged and first < merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], last))
        else:
            merged.append((first, last))
    return merged


def _outside_code_spans(chunk: str, substitute: Callable[[str], str]) -> str:
    pieces: List[str] = []
    offset = 0
    for match in _CODE_SPAN.finditer(chunk):
        pieces.append(substitute(chunk[offset : match.start()]))
        pieces.append(match.group(0))
        offset = match.end()
    pieces.append(substitute(chunk[offset:]))
    return "".join(pieces)


def _inline_destination(name: str) -> re.Pattern:
    return re.compile(r"(\]\()\s*<?" + re.escape(name) + r">?(?=[\s)])")


def _definition_destination(name: str) -> re.Pattern:
    return re.compile(r"(\]:[ \t]*(?:\r?\n)?[ \t]*)<?" + re.escape(name) + r">?(?=\s|$)")


def rewrite_links(text: str, urls: Mapping[str, str], parser: Optional[MarkdownIt] = None) -> str:
    """Point intra-doc link destinations and references at resolved URLs.

    Inline destinations and the destinations of existing reference
    definitions are rewritten in place. Reference-style links whose label
    has no definition in ``text`` get one appended at the end.
    """

    if not urls:
        return text
    md = parser or markdown_parser()

    user_env: Dict = {}
    md.parse(text, user_env)
    user_references: Dict = user_env.get("references") or {}
    defined = set(user_references.keys())

    hrefs = {name: md.normalizeLink(url) for name, url in urls.items()}
    env: Dict = {
        "references": {
            normalizeReference(name): {"href": hrefs[name], "title": ""}
            for name in urls
            if normalizeReference(name) not in defined
        }
    }
    tokens = md.parse(text, env)

    inline_targets = {md.normalizeLink(name): name for name in urls}
    used_hrefs: Set[str] = set()
    inline_ranges: Dict[Tuple[int, int], Set[str]] = {}
    for token in tokens:
        if token.type != "inline" or token.map is None:
            continue
        for child in token.children or []:
            if child.type != "link_open":
                continue
            href = str(child.attrGet("href") or "")
            used_hrefs.add(href)
            if href in inline_targets:
                inline_ranges.setdefault(tuple(token.map), set()).add(inline_targets[href])

    starts = line_starts(text)
    edits: List[Tuple[str, Span]] = []
    for first, last in _merge_ranges(inline_ranges):
        names: Set[str] = set()
        for (a, b), found in inline_ranges.items():
            if first <= a and b <= last:
                names |= found
        span = line_span(starts, first, last)
        chunk = span.slice(text)
        for name in sorted(names, key=len, reverse=True):
            pattern = _inline_destination(name)
            chunk = _outside_code_spans(
                chunk, lambda part, pattern=pattern, url=urls[name]: pattern.sub(lambda m: m.group(1) + url, part)
            )
        edits.append((chunk, span))

    for reference in user_references.values():
        name = inline_targets.get(str(reference.get("href", "")))
        line_map = reference.get("map")
        if name is None or not line_map:
            continue
        span = line_span(starts, line_map[0], line_map[1])
        chunk = _definition_destination(name).sub(lambda m, url=urls[name]: m.group(1) + url, span.slice(text), count=1)
        edits.append((chunk, span))

    rewritten = splice(text, sorted(edits, key=lambda edit: edit[1].start))

    definitions = [
        f"[{name}]: {url}"
        for name, url in urls.items()
        if normalizeReference(name) not in defined and hrefs[name] in used_hrefs
    ]
    if not definitions:
        return rewritten
    if rewritten and not rewritten.endswith("\n"):
        rewritten += "\n"
    return rewritten + "\n" + "\n".join(definitions) + "\n"


def render_summary(tree: DocTree, local_html_root_url: str, parser: Optional[MarkdownIt] = None) -> Summary:
    """Crate root docs with headings demoted and intra-doc links resolved."""

    root = tree.root_item
    if root is None:
        raise RustdocOutputError(f"root item {tree.root!r} is missing from the rustdoc index")
    docs = root.docs or ""
    if not docs:
        return Summary(text="")

    md = parser or markdown_parser()
    text = docs if docs.endswith("\n") else docs + "\n"
    text = transform_blocks(text, md)

    resolved = LinkResolver(tree, local_html_root_url).resolve(root)
    text = rewrite_links(text, resolved.resolved(), md)
    if text and not text.endswith("\n"):
        text += "\n"
    return Summary(text=text, warnings=list(resolved.warnings))

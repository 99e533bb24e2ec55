from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from syncrdme.domain.readme import ReadmeFile, find_all, replace_all
from syncrdme.domain.readme.events import iter_events

CONTENTS = {
    "title": "# demo\n",
    "badge": "[![crates.io](https://img.shields.io/crates/v/demo.svg)](https://crates.io/crates/demo)\n",
    "doc-summary": "",
}
GENERATED_LINES = {line for body in CONTENTS.values() for line in body.splitlines()}

paragraphs = st.from_regex(r"[a-z][a-z ]{0,20}", fullmatch=True)
markers = st.sampled_from([f"<!-- sync-rdme {kind} -->" for kind in CONTENTS])
documents = st.lists(st.one_of(paragraphs, markers), max_size=8).map(lambda blocks: "".join(f"{block}\n\n" for block in blocks))


def sync(text: str) -> str:
    regions = find_all(ReadmeFile("README.md", text), iter_events(text))
    return replace_all(text, regions, [CONTENTS[str(region.kind)] for region in regions])


def plain_lines(text: str) -> list[str]:
    return [line for line in text.splitlines() if not line.startswith("<!-- sync-rdme") and line not in GENERATED_LINES]


@settings(max_examples=100)
@given(text=documents)
def test_sync_is_idempotent(text: str) -> None:
    once = sync(text)
    assert sync(once) == once


@settings(max_examples=100)
@given(text=documents)
def test_unmarked_text_is_preserved(text: str) -> None:
    assert plain_lines(sync(text)) == plain_lines(text)

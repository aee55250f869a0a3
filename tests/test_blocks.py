from __future__ import annotations

import json
from pathlib import Path

import pytest

from chatlog_studio.blocks import (
    BlockIds,
    ContentBlock,
    TranscriptLoadError,
    blocks_from_texts,
    has_image,
    is_contentful,
    load_blocks,
    split_lines,
)


def test_split_lines_drops_blank_lines():
    assert split_lines("a\r\n\n  \nb\nc  ") == ["a", "b", "c  "]
    assert split_lines("") == []


def test_is_contentful():
    assert is_contentful(ContentBlock(id=0, title="t", content=" x "))
    assert not is_contentful(ContentBlock(id=0, title="t", content=" \n\t"))
    assert is_contentful(ContentBlock(id=0, title="t", content='<img src="a.png">'))


def test_has_image_requires_double_quoted_src():
    assert has_image('<img src="a.png">')
    assert has_image('<IMG class="x" SRC="a.png" />')
    assert not has_image("<img src='a.png'>")
    assert not has_image('<img data-src="a.png">')


def test_block_ids_are_monotonic():
    ids = BlockIds()
    assert ids.allocate() == 0
    assert ids.reserve(5) == 5
    assert ids.allocate() == 6
    assert ids.reserve(2) == 2
    assert ids.allocate() == 7


def test_blocks_from_texts_titles():
    blocks = blocks_from_texts(["a", "b"])
    assert [(b.id, b.title) for b in blocks] == [(0, "Block 1"), (1, "Block 2")]


def test_load_text_file(sample_transcript: Path):
    (block,) = load_blocks([sample_transcript])
    assert block.id == 0
    assert block.title == "sample_transcript"
    assert block.content.startswith("# The Lighthouse")
    assert not block.collapsible


def test_load_json_blocks(sample_blocks_json: Path):
    blocks = load_blocks([sample_blocks_json])
    assert [b.id for b in blocks] == [3, 4, 5, 6]
    assert [b.title for b in blocks] == ["Prologue", "Chapter 1", "Notes", "Block 7"]
    assert blocks[1].collapsible and not blocks[1].collapsed
    assert blocks[3].collapsed


def test_ids_continue_across_files(sample_blocks_json: Path, sample_transcript: Path):
    blocks = load_blocks([sample_blocks_json, sample_transcript])
    assert blocks[-1].id == 7


def test_collapsible_flag_applies_to_every_block(sample_blocks_json: Path, sample_transcript: Path):
    blocks = load_blocks([sample_transcript, sample_blocks_json], collapsible=True)
    assert all(b.collapsible for b in blocks)
    assert blocks[-1].collapsed


def test_json_list_payload(tmp_path: Path):
    path = tmp_path / "blocks.json"
    path.write_text(json.dumps([{"content": "x"}, {"content": "y", "title": "Why"}]), encoding="utf-8")
    blocks = load_blocks([path])
    assert [b.title for b in blocks] == ["Block 1", "Why"]


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        json.dumps({"blocks": "nope"}),
        json.dumps(["not an object"]),
        json.dumps([{"content": 5}]),
        json.dumps(7),
    ],
)
def test_bad_json_raises(tmp_path: Path, payload: str):
    path = tmp_path / "bad.json"
    path.write_text(payload, encoding="utf-8")
    with pytest.raises(TranscriptLoadError):
        load_blocks([path])


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(TranscriptLoadError, match="File not found"):
        load_blocks([tmp_path / "nope.txt"])

"""Tests for caption timeline parsing."""

import pytest

from videofactory.player.captions import (
    Cue,
    find_cue_index,
    normalize_caption_document,
    parse_cues,
    parse_timestamp,
)


def test_parse_cues_two_cues(vtt):
    assert parse_cues(vtt) == [Cue(0.0, 2.5), Cue(2.5, 5.0)]


def test_parse_timestamp_forms():
    assert parse_timestamp("00:02.500") == 2.5
    assert parse_timestamp("01:00:01.250") == 3601.25
    assert parse_timestamp("00:01,500") == 1.5
    with pytest.raises(ValueError):
        parse_timestamp("garbage")


def test_malformed_timing_lines_are_skipped():
    document = "\n".join([
        "WEBVTT",
        "",
        "00:00.000 --> 00:01.000",
        "one",
        "",
        "nonsense --> 00:02.000",
        "bad",
        "",
        "00:03.000 --> 00:02.000",
        "backwards",
        "",
        "00:02.000 --> 00:04.000 align:start",
        "two",
    ])
    assert parse_cues(document) == [Cue(0.0, 1.0), Cue(2.0, 4.0)]


def test_cues_keep_document_order():
    document = "WEBVTT\n\n00:05.000 --> 00:06.000\nb\n\n00:00.000 --> 00:01.000\na\n"
    assert [cue.start for cue in parse_cues(document)] == [5.0, 0.0]


def test_empty_document_has_no_cues():
    assert parse_cues("") == []
    assert parse_cues("WEBVTT\n") == []


def test_cue_interval_is_half_open():
    cue = Cue(2.5, 5.0)
    assert cue.contains(2.5)
    assert cue.contains(4.999)
    assert not cue.contains(5.0)
    assert cue.duration == 2.5


def test_find_cue_index_first_match_wins_on_overlap():
    cues = [Cue(0.0, 3.0), Cue(2.0, 5.0)]
    assert find_cue_index(cues, 2.5) == 0
    assert find_cue_index(cues, 4.0) == 1
    assert find_cue_index(cues, 9.0) == -1


def test_normalize_adds_missing_header():
    document = normalize_caption_document("00:00.000 --> 00:01.000\nHi")
    assert document.startswith("WEBVTT\n\n00:00.000")
    assert document.endswith("\n")


def test_normalize_strips_markdown_fences():
    raw = "```vtt\nWEBVTT\n\n00:00.000 --> 00:01.000\nHi\n```"
    document = normalize_caption_document(raw)
    assert "```" not in document
    assert document.startswith("WEBVTT")
    assert parse_cues(document) == [Cue(0.0, 1.0)]

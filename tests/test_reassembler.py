"""Tests for splicing translated text back into subtitle files."""

import pytest
from conftest import read_fixture

from subweave.core.models import SubtitleFormat
from subweave.subtitles.parser import parse
from subweave.subtitles.placeholders import make_token
from subweave.subtitles.reassembler import reassemble, self_check, serialize

TAG0, TAG1, BR2 = make_token("TAG", 0), make_token("TAG", 1), make_token("BR", 2)

THREE_CUES = (
    "1\n00:00:01,000 --> 00:00:02,000\nBonjour.\n\n"
    "2\n00:00:03,000 --> 00:00:05,000\nIl a <b>enfin</b> gagné.\n\n"
    "3\n00:00:06,000 --> 00:00:07,000\nAu revoir.\n"
)


def test_markup_follows_translated_word():
    parsed = parse(THREE_CUES, SubtitleFormat.SRT)
    translated = {
        "1": "Hello.",
        "2": f"He {TAG0}finally{TAG1} won.",
        "3": "Goodbye.",
    }
    assert reassemble(parsed, translated) == (
        "1\n00:00:01,000 --> 00:00:02,000\nHello.\n\n"
        "2\n00:00:03,000 --> 00:00:05,000\nHe <b>finally</b> won.\n\n"
        "3\n00:00:06,000 --> 00:00:07,000\nGoodbye.\n"
    )


def test_missing_cue_keeps_original():
    parsed = parse(THREE_CUES, SubtitleFormat.SRT)
    output = reassemble(parsed, {"1": "Hello."})
    assert "Hello." in output
    assert "Il a <b>enfin</b> gagné." in output
    assert "Au revoir." in output


def test_crlf_breaks_restored(sample_srt):
    text = sample_srt.replace("\n", "\r\n")
    parsed = parse(text, SubtitleFormat.SRT)
    output = reassemble(parsed, {"2": f"{TAG0}I am{TAG1} very happy{BR2}to see you."})
    assert "<i>I am</i> very happy\r\nto see you.\r\n" in output
    assert "\n" not in output.replace("\r\n", "")


@pytest.mark.parametrize(
    "name,fmt",
    [
        ("sample.srt", SubtitleFormat.SRT),
        ("sample.vtt", SubtitleFormat.VTT),
        ("sample.ass", SubtitleFormat.ASS),
        ("sample.ssa", SubtitleFormat.SSA),
    ],
    ids=["srt", "vtt", "ass", "ssa"],
)
def test_timing_and_raw_material_unchanged(name, fmt):
    source = read_fixture(name)
    parsed = parse(source, fmt)
    translated = {cue.id: "TRANSLATED " + cue.text_skeleton for cue in parsed.cues}

    output = parse(reassemble(parsed, translated), fmt)

    assert output.header == parsed.header
    assert output.footer == parsed.footer
    assert len(output.cues) == len(parsed.cues)
    for before, after in zip(parsed.cues, output.cues):
        assert after.id == before.id
        assert (after.start_ms, after.end_ms) == (before.start_ms, before.end_ms)
        assert after.raw_prefix == before.raw_prefix
        assert after.raw_suffix == before.raw_suffix
        assert after.text_original.startswith("TRANSLATED ")


def test_ass_fields_preserved(sample_ass):
    parsed = parse(sample_ass, SubtitleFormat.ASS)
    output = reassemble(parsed, {"ASS_1_L14": "Very well, thanks."})
    assert "Dialogue: 0,0:00:04.00,0:00:06.00,Default,,0,0,0,,Very well, thanks.\n" in output


def test_serialize_and_self_check(sample_vtt):
    parsed = parse(sample_vtt, SubtitleFormat.VTT)
    assert serialize(parsed) == sample_vtt
    assert self_check(parsed, sample_vtt)
    assert not self_check(parsed, sample_vtt + "\n")

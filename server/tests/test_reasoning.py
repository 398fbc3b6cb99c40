"""Tests for thinking-tag extraction."""
import pytest

from conftest import collect
from praxis.core.errors import ErrorKind
from praxis.routing.reasoning import ReasoningExtractor, extract_reasoning
from praxis.schemas.stream import Done, Error, ReasoningDelta, TextDelta


def _channels(events):
    """Concatenate adjacent deltas of the same kind: [(type, text), ...]."""
    merged = []
    for event in events:
        if merged and merged[-1][0] == event.type:
            merged[-1] = (event.type, merged[-1][1] + event.text)
        else:
            merged.append((event.type, event.text))
    return merged


def _run(chunks, tag="thinking"):
    extractor = ReasoningExtractor(tag)
    out = []
    for chunk in chunks:
        out.extend(extractor.feed(chunk))
    out.extend(extractor.flush())
    return out


def test_reasoning_then_text():
    events = _run(["<thinking>ab", "cd</thinking>ef"])
    assert _channels(events) == [("reasoning-delta", "abcd"), ("text-delta", "ef")]


@pytest.mark.parametrize("size", [1, 2, 3, 5, 7, 11])
def test_tag_split_at_any_boundary(size):
    source = "<thinking>abcd</thinking>ef"
    chunks = [source[i:i + size] for i in range(0, len(source), size)]
    assert _channels(_run(chunks)) == [("reasoning-delta", "abcd"), ("text-delta", "ef")]


def test_text_outside_tags_passes_through():
    events = _run(["Hello ", "<think", "ing>plan</thin", "king> world"])
    assert _channels(events) == [
        ("text-delta", "Hello "),
        ("reasoning-delta", "plan"),
        ("text-delta", " world"),
    ]


def test_lookalike_prefix_is_released_as_text():
    events = _run(["a <thin", "g> b"])
    assert _channels(events) == [("text-delta", "a <thing> b")]


def test_lookback_is_bounded_by_tag_length():
    extractor = ReasoningExtractor("thinking")
    out = extractor.feed("x" * 100 + "<thinkin")
    assert out == [TextDelta(text="x" * 100)]
    assert len(extractor._buffer) <= len("<thinking>") - 1


def test_unclosed_reasoning_is_flushed_as_reasoning():
    assert _run(["<thinking>still going"]) == [ReasoningDelta(text="still going")]


def test_custom_tag_name():
    assert _channels(_run(["<reason>r</reason>t"], tag="reason")) == [
        ("reasoning-delta", "r"),
        ("text-delta", "t"),
    ]


async def _events(*items):
    for item in items:
        yield item


@pytest.mark.asyncio
async def test_stream_wrapper_flushes_before_terminal():
    events = await collect(extract_reasoning(
        _events(TextDelta(text="<thinking>x</thin"), Done()),
    ))
    assert events == [ReasoningDelta(text="x"), ReasoningDelta(text="</thin"), Done()]


@pytest.mark.asyncio
async def test_stream_wrapper_keeps_error_terminal_last():
    err = Error(kind=ErrorKind.UPSTREAM_CONNECTION, message="reset")
    events = await collect(extract_reasoning(
        _events(TextDelta(text="<thinking>ab"), TextDelta(text="cd</thinking>ef"), err),
    ))
    assert _channels(events[:-1]) == [("reasoning-delta", "abcd"), ("text-delta", "ef")]
    assert events[-1] == err

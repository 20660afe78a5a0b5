"""Tests for composing sayf/replyf messages."""
from __future__ import annotations

import asyncio
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from parrot.composer import (
    FormatError,
    LimitExceeded,
    MessageComposer,
    RenderFailed,
    _TemplateBuffer,
    find_limit_violation,
)
from parrot.text import WORD_JOINER, TextFormatter
from parrot.tokenizer import tokenize

ROOM = object()


class RecordingResolver:
    """Resolver stub that remembers lookups and flags overlapping calls."""

    def __init__(self, names: Optional[Dict[str, str]] = None) -> None:
        self.names = names or {}
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_pingable_name(self, room, candidate: str) -> Optional[str]:
        assert room is ROOM
        self.calls.append(candidate)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)
        self.in_flight -= 1
        return self.names.get(candidate)


def _composer(resolver, limit: int = 500) -> MessageComposer:
    return MessageComposer(resolver, TextFormatter(truncation_limit=limit))


@pytest.mark.asyncio
async def test_template_without_specifiers_is_returned_unchanged():
    resolver = RecordingResolver()

    result = await _composer(resolver).compose(ROOM, ["hello there", "unused", "args"])

    assert result == "hello there"
    assert resolver.calls == []


@pytest.mark.asyncio
async def test_escape_sequences_are_expanded():
    result = await _composer(RecordingResolver()).compose(ROOM, [r"one\ntwo"])

    assert result == "one\ntwo"


@pytest.mark.asyncio
async def test_explicit_positions_pick_their_own_arguments():
    resolver = RecordingResolver({"alice": "Alice", "bob": "Bob"})

    result = await _composer(resolver).compose(ROOM, ["%2$p hi %1$p", "alice", "bob"])

    assert result == "@Bob hi @Alice"
    assert resolver.calls == ["bob", "alice"]


@pytest.mark.asyncio
async def test_implicit_index_counts_every_specifier():
    resolver = RecordingResolver({"bob": "Bob"})

    result = await _composer(resolver).compose(ROOM, ["%s meets %p", "alice", "bob"])

    assert result == "alice meets @Bob"
    assert resolver.calls == ["bob"]


@pytest.mark.asyncio
async def test_ping_sigil_skips_the_resolver():
    resolver = RecordingResolver({"@carol": "nope"})

    result = await _composer(resolver).compose(ROOM, ["hi %p", "@carol"])

    assert result == f"hi @{WORD_JOINER}carol"
    assert resolver.calls == []


@pytest.mark.asyncio
async def test_unresolved_argument_is_left_alone():
    resolver = RecordingResolver()

    result = await _composer(resolver).compose(ROOM, ["hi %p", "nobody"])

    assert result == "hi nobody"
    assert resolver.calls == ["nobody"]


@pytest.mark.asyncio
async def test_resolver_calls_are_sequential_and_ordered():
    resolver = RecordingResolver({"a": "A", "b": "B", "c": "C"})

    result = await _composer(resolver).compose(ROOM, ["%p, %p and %p", "a", "b", "c"])

    assert result == "@A, @B and @C"
    assert resolver.calls == ["a", "b", "c"]
    assert resolver.max_in_flight == 1


@pytest.mark.asyncio
async def test_width_over_limit_aborts_before_any_lookup():
    resolver = RecordingResolver({"alice": "Alice"})

    with pytest.raises(LimitExceeded) as excinfo:
        await _composer(resolver, limit=500).compose(ROOM, ["%p %1000s", "alice", "x"])

    assert resolver.calls == []
    assert "1000" in str(excinfo.value)


@pytest.mark.asyncio
async def test_precision_over_limit_is_rejected():
    with pytest.raises(LimitExceeded):
        await _composer(RecordingResolver(), limit=10).compose(ROOM, ["%.11f", "1"])


@pytest.mark.asyncio
async def test_values_at_the_limit_are_accepted():
    result = await _composer(RecordingResolver(), limit=3).compose(ROOM, ["[%3.3s]", "abcdef"])

    assert result == "[abc]"


@pytest.mark.asyncio
async def test_render_failure_is_atomic():
    resolver = RecordingResolver({"alice": "Alice"})

    with pytest.raises(RenderFailed) as excinfo:
        await _composer(resolver).compose(ROOM, ["%p owes %d", "alice", "lots"])

    assert resolver.calls == ["alice"]
    assert isinstance(excinfo.value, FormatError)
    assert excinfo.value.__cause__ is not None


@pytest.mark.asyncio
async def test_missing_argument_for_mention_fails_on_render():
    resolver = RecordingResolver()

    with pytest.raises(RenderFailed):
        await _composer(resolver).compose(ROOM, ["hi %3$p", "alice"])

    assert resolver.calls == []


@pytest.mark.asyncio
async def test_zero_position_never_wraps_to_last_argument():
    resolver = RecordingResolver({"bob": "Bob"})

    with pytest.raises(RenderFailed):
        await _composer(resolver).compose(ROOM, ["%0$p", "alice", "bob"])

    assert resolver.calls == []


@pytest.mark.asyncio
async def test_resolver_errors_propagate_unchanged():
    resolver = AsyncMock()
    resolver.get_pingable_name.side_effect = [ConnectionError("gateway down"), "B"]

    with pytest.raises(ConnectionError):
        await MessageComposer(resolver).compose(ROOM, ["%p %p", "a", "b"])

    assert resolver.get_pingable_name.await_count == 1


@pytest.mark.asyncio
async def test_literal_pings_in_template_are_neutralised():
    result = await _composer(RecordingResolver()).compose(ROOM, ["ping @everyone %s", "x"])

    assert result == f"ping @{WORD_JOINER}everyone x"


@pytest.mark.asyncio
async def test_empty_components_render_empty_message():
    assert await _composer(RecordingResolver()).compose(ROOM, []) == ""


def test_find_limit_violation_reports_field():
    violation = find_limit_violation(tokenize("%5s %600.2f"), 500)

    assert violation is not None
    assert violation.field == "width"
    assert violation.value == 600
    assert violation.token.offset == 4
    assert find_limit_violation(tokenize("%5s %.2f"), 500) is None


def test_template_buffer_tracks_shifted_offsets():
    buffer = _TemplateBuffer("%p and %p")

    buffer.splice(0, 2, "{mention}")
    buffer.splice(7, 2, "{x}")

    assert buffer.text == "{mention} and {x}"
    assert buffer.locate(7) == 14


@pytest.mark.asyncio
async def test_huge_width_is_a_limit_error():
    resolver = RecordingResolver()

    with pytest.raises(LimitExceeded):
        await _composer(resolver).compose(ROOM, ["%" + "1" * 5000 + "s", "x"])


@pytest.mark.asyncio
async def test_huge_numeric_argument_is_a_render_error():
    with pytest.raises(RenderFailed):
        await _composer(RecordingResolver()).compose(ROOM, ["%d", "1" * 5000])


@pytest.mark.asyncio
async def test_width_produced_by_escape_expansion_is_checked():
    template = "%'\\\\5000s"
    assert find_limit_violation(tokenize(template), 500) is None

    with pytest.raises(LimitExceeded):
        await _composer(RecordingResolver()).compose(ROOM, [template, "x"])


@pytest.mark.asyncio
async def test_at_sign_pad_character_survives_ping_stripping():
    result = await _composer(RecordingResolver()).compose(ROOM, ["[%'@5s] @bob", "ab"])

    assert result == f"[@@@ab] @{WORD_JOINER}bob"

"""Tests for the sequential async iteration helpers."""

import pytest

from dataknobs_schema.sequencer import STOP, iterate_list, iterate_mapping


class TestIterateList:
    """Test iterate_list signal handling."""

    async def test_empty_sequence_succeeds(self):
        assert await iterate_list([], lambda item, index: pytest.fail("not called")) is None
        assert await iterate_list(None, lambda item, index: pytest.fail("not called")) is None

    async def test_runs_all_steps_in_order(self):
        seen = []

        async def step(item, index):
            seen.append((index, item))

        assert await iterate_list(["a", "b", "c"], step) is None
        assert seen == [(0, "a"), (1, "b"), (2, "c")]

    async def test_stop_ends_iteration_successfully(self):
        seen = []

        async def step(item, index):
            seen.append(item)
            return STOP if item == "b" else None

        assert await iterate_list(["a", "b", "c"], step) is None
        assert seen == ["a", "b"]

    async def test_error_is_forwarded_and_stops(self):
        seen = []
        failure = ValueError("boom")

        async def step(item, index):
            seen.append(item)
            return failure if item == "b" else None

        assert await iterate_list(["a", "b", "c"], step) is failure
        assert seen == ["a", "b"]

    async def test_sync_steps_are_supported(self):
        failure = RuntimeError("sync")
        assert await iterate_list([1, 2], lambda item, index: failure if item == 2 else None) is failure

    async def test_falsy_signals_continue(self):
        seen = []

        def step(item, index):
            seen.append(item)
            return item

        assert await iterate_list([0, False, "", None], step) is None
        assert seen == [0, False, "", None]


class TestIterateMapping:
    """Test iterate_mapping."""

    async def test_visits_every_entry(self):
        seen = {}

        async def step(value, key):
            seen[key] = value

        assert await iterate_mapping({"a": 1, "b": 2}, step) is None
        assert seen == {"a": 1, "b": 2}

    async def test_stop_in_one_entry_stops_iteration(self):
        seen = []

        async def step(value, key):
            seen.append(key)
            return STOP

        assert await iterate_mapping({"a": 1, "b": 2}, step) is None
        assert len(seen) == 1

    async def test_first_error_wins(self):
        errors = {"a": None, "b": KeyError("b"), "c": KeyError("c")}

        async def step(value, key):
            return value

        assert await iterate_mapping(errors, step) is errors["b"]

    async def test_none_mapping_succeeds(self):
        assert await iterate_mapping(None, lambda value, key: pytest.fail("not called")) is None

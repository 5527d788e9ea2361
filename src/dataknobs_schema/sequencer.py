"""Sequential async iteration with first-failure short-circuit.

Every check the verifier performs is a step that resolves to a signal:

- ``None`` (or any falsy value): the step passed, run the next one
- ``STOP`` (the literal ``True``): stop iterating, the sequence succeeded
- anything else (an exception instance): stop and return it as the result

Steps run strictly one after another; nothing is fanned out, so the reported
failure is always the first one in iteration order.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any, TypeVar, Union

T = TypeVar("T")
K = TypeVar("K")

STOP = True

Signal = Union[None, bool, BaseException]
Step = Callable[[T, K], Union[Signal, Awaitable[Signal]]]


async def _run(pairs: Iterable[tuple[K, T]], step: Step) -> Signal:
    for key, item in pairs:
        signal = step(item, key)
        if inspect.isawaitable(signal):
            signal = await signal
        if not signal:
            continue
        if signal is STOP:
            return None
        return signal
    return None


async def iterate_list(items: Iterable[T] | None, step: Step) -> Signal:
    """Run ``step(item, index)`` over ``items`` in order.

    Args:
        items: Items to visit; ``None`` counts as empty
        step: Plain or async callable returning a signal

    Returns:
        None on success (including a soft ``STOP``), otherwise the first
        failure signal
    """
    return await _run(enumerate(items or ()), step)


async def iterate_mapping(mapping: Mapping[K, T] | None, step: Step) -> Signal:
    """Run ``step(value, key)`` over every entry of ``mapping``.

    Entry order follows the mapping's own iteration order, which callers must
    not rely on beyond "first failure wins".
    """
    return await _run((mapping or {}).items(), step)


__all__ = ["STOP", "Signal", "Step", "iterate_list", "iterate_mapping"]

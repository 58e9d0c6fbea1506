"""Tolerant fan-out: run awaitables concurrently, keep whatever succeeds.

``gather_settled`` waits for every awaitable and tags each result as
``Success`` or ``Failure`` instead of letting one exception cancel the
rest. Each awaitable gets its own timeout; a timeout is a ``Failure``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: BaseException

    @property
    def timed_out(self) -> bool:
        return isinstance(self.error, TimeoutError)


async def _settle(awaitable: Awaitable[T], timeout: float | None) -> Success[T] | Failure:
    try:
        return Success(await asyncio.wait_for(awaitable, timeout))
    except asyncio.CancelledError:
        raise
    except Exception as e:
        return Failure(e)


async def gather_settled(
    *awaitables: Awaitable[T],
    timeout: float | None = None,
) -> list[Success[T] | Failure]:
    """Await all ``awaitables`` concurrently.

    Args:
        awaitables: Coroutines or futures to run
        timeout: Per-awaitable upper bound in seconds (None = no bound)

    Returns:
        One outcome per awaitable, in argument order
    """
    return list(await asyncio.gather(*(_settle(item, timeout) for item in awaitables)))

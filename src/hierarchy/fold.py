"""Post-order folds and pre-order visits over a hierarchy.

A single coroutine walks the tree; the fan-out strategy decides whether the
children of a node are evaluated one after another or as concurrent tasks.
The synchronous entry points drive that coroutine directly, without an event
loop, which works because a sequential walk with plain callbacks never suspends.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Coroutine, Sequence
from enum import Enum
from typing import Any, TypeVar

from .graph import HierarchyNode

R = TypeVar("R")

Path = tuple[HierarchyNode, ...]

_SYNC_AWAITABLE_ERROR = "synchronous traversal got an awaitable callback result; use the async variant"


class FanOut(str, Enum):
    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"


def fold(node: HierarchyNode, fn: Callable[[Path, list[R]], R]) -> R:
    """Fold the tree under ``node``; ``fn(path, child_results)`` runs children-first."""
    return _run_to_completion(_fold(node, (), fn, FanOut.SEQUENTIAL, await_results=False))


async def fold_async(
    node: HierarchyNode,
    fn: Callable[[Path, list[R]], R | Awaitable[R]],
    fan_out: FanOut = FanOut.CONCURRENT,
) -> R:
    """Fold with ``fn`` possibly async; sibling subtrees run concurrently by default.

    Child results are always passed in child order, whatever order they finish in.
    """
    return await _fold(node, (), fn, fan_out, await_results=True)


def visit(node: HierarchyNode, action: Callable[[Path], Any]) -> None:
    _run_to_completion(_visit(node, (), action, FanOut.SEQUENTIAL, await_results=False))


async def visit_async(
    node: HierarchyNode,
    action: Callable[[Path], Any],
    fan_out: FanOut = FanOut.SEQUENTIAL,
) -> None:
    await _visit(node, (), action, fan_out, await_results=True)


async def _fold(
    node: HierarchyNode,
    path: Path,
    fn: Callable[[Path, list[Any]], Any],
    fan_out: FanOut,
    await_results: bool,
) -> Any:
    path = path + (node,)
    child_results = await _run_children(
        node.children,
        lambda child: _fold(child, path, fn, fan_out, await_results),
        fan_out,
    )
    return await _settle(fn(path, child_results), await_results)


async def _visit(
    node: HierarchyNode,
    path: Path,
    action: Callable[[Path], Any],
    fan_out: FanOut,
    await_results: bool,
) -> None:
    path = path + (node,)
    await _settle(action(path), await_results)
    await _run_children(
        node.children,
        lambda child: _visit(child, path, action, fan_out, await_results),
        fan_out,
    )


async def _settle(value: Any, await_results: bool) -> Any:
    if not inspect.isawaitable(value):
        return value
    if await_results:
        return await value
    if inspect.iscoroutine(value):
        value.close()
    raise RuntimeError(_SYNC_AWAITABLE_ERROR)


async def _run_children(
    children: Sequence[HierarchyNode],
    step: Callable[[HierarchyNode], Coroutine[Any, Any, Any]],
    fan_out: FanOut,
) -> list[Any]:
    if fan_out is FanOut.SEQUENTIAL or len(children) < 2:
        return [await step(child) for child in children]

    tasks = [asyncio.create_task(step(child)) for child in children]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _run_to_completion(coroutine: Coroutine[Any, Any, R]) -> R:
    try:
        coroutine.send(None)
    except StopIteration as stop:
        return stop.value
    coroutine.close()
    raise RuntimeError(_SYNC_AWAITABLE_ERROR)

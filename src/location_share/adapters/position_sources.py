"""Position sources for submitters running outside a browser."""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

from location_share.domain.locations import PositionFix
from location_share.services.submitter import (
    ErrorCallback,
    PositionCallback,
    PositionSource,
    WatchOptions,
)


@dataclass
class ReplayPositionSource(PositionSource):
    """Emit a fixed series of fixes, one per interval."""

    fixes: Sequence[PositionFix]
    interval_seconds: float = 5.0
    _tasks: dict[int, asyncio.Task[None]] = field(default_factory=dict, init=False)
    _next_handle: int = field(default=1, init=False)

    def watch(
        self,
        on_position: PositionCallback,
        on_error: ErrorCallback,
        options: WatchOptions,
    ) -> int:
        """Start replaying on the running event loop."""
        handle = self._next_handle
        self._next_handle += 1
        self._tasks[handle] = asyncio.get_running_loop().create_task(
            self._replay(on_position)
        )
        return handle

    def cancel(self, handle: int) -> None:
        task = self._tasks.pop(handle, None)
        if task is not None:
            task.cancel()

    async def drain(self) -> None:
        """Wait until every active subscription has replayed or was cancelled."""
        tasks = set(self._tasks.values())
        if tasks:
            await asyncio.wait(tasks)

    async def _replay(self, on_position: PositionCallback) -> None:
        for index, fix in enumerate(self.fixes):
            if index:
                await asyncio.sleep(self.interval_seconds)
            await on_position(fix)

"""Remote module backend: fetches Python source over HTTP on an asyncio loop.

Identifiers are URLs, resolved against an optional base URL. ``create``
schedules the fetch as a task on the running event loop and returns at
once; the module is executed and completion reported later, on the loop
thread. A failed fetch is logged and the identifier stays LOADING, so
anything waiting on it simply never becomes ready.
"""

from __future__ import annotations

import asyncio
import logging
from types import ModuleType
from typing import Any
from urllib.parse import urljoin

from depload.core.loading.models import ResourceHandle
from depload.exceptions import ResourceError
from depload.resources.base import Finish, ResourceBackend
from depload.resources.http_client import DEFAULT_TIMEOUT, fetch_source
from depload.resources.modules import NAME_ATTRIBUTE, module_name_for

logger = logging.getLogger(__name__)


def _running_loop() -> asyncio.AbstractEventLoop:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        raise ResourceError(
            "RemoteModuleBackend must be used from a running asyncio event loop"
        ) from None


class RemoteModuleBackend(ResourceBackend):
    """Loads modules from URLs with ``httpx``.

    Args:
        base_url: URL relative identifiers are joined against.
        timeout: Per-request timeout in seconds.
        transport: Optional ``httpx`` transport, e.g. ``httpx.MockTransport``.
    """

    type = "pyurl"

    def __init__(
        self,
        base_url: str = "",
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Any = None,  # noqa: ANN401
    ) -> None:
        super().__init__()
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._sources: dict[str, str] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}

    def _is_absolute(self, identifier: str) -> bool:
        return "://" in identifier

    def _resolve(self, identifier: str) -> str:
        return urljoin(self._base_url, identifier) if self._base_url else identifier

    async def _get(self, url: str) -> str | None:
        cached = self._sources.pop(url, None)
        if cached is not None:
            return cached
        return await fetch_source(url, timeout=self._timeout, transport=self._transport)

    async def _run(self, handle: ResourceHandle, finish: Finish) -> None:
        source = await self._get(handle.identifier)
        if source is None:
            return
        module = ModuleType(module_name_for(handle.identifier))
        module.__file__ = handle.identifier
        if handle.name:
            setattr(module, NAME_ATTRIBUTE, handle.name)
        try:
            exec(compile(source, handle.identifier, "exec"), module.__dict__)
        except Exception:
            logger.warning("Failed to execute remote module: %s", handle.identifier, exc_info=True)
            return
        finish(module)

    def _fetch(self, handle: ResourceHandle, finish: Finish) -> None:
        loop = _running_loop()
        task = loop.create_task(self._run(handle, finish))
        self._tasks[handle.identifier] = task
        task.add_done_callback(lambda t: self._forget(handle.identifier, t))

    def _forget(self, identifier: str, task: asyncio.Task[None]) -> None:
        if self._tasks.get(identifier) is task:
            del self._tasks[identifier]

    def _teardown(self, handle: ResourceHandle) -> None:
        task = self._tasks.pop(handle.identifier, None)
        if task is not None and not task.done():
            task.cancel()

    async def _prefetch(self, url: str) -> None:
        text = await fetch_source(url, timeout=self._timeout, transport=self._transport)
        if text is not None:
            self._sources[url] = text

    def _warm(self, identifier: str) -> None:
        _running_loop().create_task(self._prefetch(identifier))

    async def wait(self) -> None:
        """Wait until every fetch started so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

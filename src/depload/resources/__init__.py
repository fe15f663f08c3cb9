"""Resource backends: the fetch capability consumed by the loader engine.

- ``ResourceBackend`` -- abstract base with status and path bookkeeping.
- ``ModuleBackend`` -- executes local Python source files (type "py").
- ``RemoteModuleBackend`` -- fetches Python source over HTTP on an asyncio
  loop (type "pyurl"); requires the ``remote`` extra.
"""

from depload.resources.base import ResourceBackend
from depload.resources.modules import ModuleBackend
from depload.resources.remote import RemoteModuleBackend

__all__ = [
    "ModuleBackend",
    "RemoteModuleBackend",
    "ResourceBackend",
]

"""Local module backend: loads Python source files as modules.

Identifiers are file paths, canonicalised to absolute paths. Loading
executes the file through the import system into a fresh module
registered in ``sys.modules``; completion is reported synchronously,
before ``create`` returns. Modules loaded under a name carry a
``__depload_name__`` attribute, which is how ``discover`` recognises them
in a later loader instance.
"""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import sys
from collections.abc import Iterable
from importlib.machinery import SourceFileLoader
from pathlib import Path
from types import ModuleType

from depload.core.loading.models import ResourceHandle
from depload.resources.base import Finish, ResourceBackend

logger = logging.getLogger(__name__)

NAME_ATTRIBUTE = "__depload_name__"


def module_name_for(path: str) -> str:
    """Derive a unique, import-safe module name for a source path."""
    digest = hashlib.sha256(path.encode()).hexdigest()[:12]
    stem = "".join(c if c.isalnum() else "_" for c in Path(path).stem)
    return f"_depload_{stem}_{digest}"


class _PrefetchedLoader(SourceFileLoader):
    """Source loader that compiles text read ahead of time by ``prefetch``."""

    def __init__(self, fullname: str, path: str, source: str) -> None:
        super().__init__(fullname, path)
        self._source = source

    def get_code(self, fullname: str):
        return self.source_to_code(self._source, self.path)


class ModuleBackend(ResourceBackend):
    """Executes local ``.py`` files as modules.

    Args:
        base_dir: Directory relative identifiers are resolved against.
            Defaults to the current working directory at resolve time.
    """

    type = "py"

    def __init__(self, base_dir: str | Path | None = None) -> None:
        super().__init__()
        self._base_dir = Path(base_dir) if base_dir is not None else None
        self._sources: dict[str, str] = {}

    def module(self, identifier: str) -> ModuleType | None:
        """Return the module loaded for ``identifier``, if any."""
        handle = self.handle(identifier)
        return handle.value if handle is not None else None

    def _is_absolute(self, identifier: str) -> bool:
        return Path(identifier).is_absolute()

    def _resolve(self, identifier: str) -> str:
        base = self._base_dir if self._base_dir is not None else Path.cwd()
        return str((base / identifier).resolve())

    def _loader(self, module_name: str, path: str) -> SourceFileLoader:
        source = self._sources.pop(path, None)
        if source is not None:
            return _PrefetchedLoader(module_name, path, source)
        return SourceFileLoader(module_name, path)

    def _fetch(self, handle: ResourceHandle, finish: Finish) -> None:
        path = handle.identifier
        if path not in self._sources and not Path(path).is_file():
            logger.warning("Cannot read module source: %s", path)
            return
        module_name = module_name_for(path)
        loader = self._loader(module_name, path)
        spec = importlib.util.spec_from_file_location(module_name, path, loader=loader)
        module = importlib.util.module_from_spec(spec)
        if handle.name:
            setattr(module, NAME_ATTRIBUTE, handle.name)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            sys.modules.pop(module_name, None)
            logger.warning("Failed to execute module: %s", path, exc_info=True)
            return
        finish(module)

    def _teardown(self, handle: ResourceHandle) -> None:
        if isinstance(handle.value, ModuleType):
            sys.modules.pop(handle.value.__name__, None)

    def _warm(self, identifier: str) -> None:
        try:
            self._sources[identifier] = Path(identifier).read_text(encoding="utf-8")
        except OSError:
            logger.warning("Cannot prefetch module source: %s", identifier)

    def _existing(self) -> Iterable[ResourceHandle]:
        for module in list(sys.modules.values()):
            name = getattr(module, NAME_ATTRIBUTE, None)
            path = getattr(module, "__file__", None)
            if name and path:
                yield ResourceHandle(
                    identifier=self.canonicalize(path),
                    type=self.type,
                    attributes={"name": name},
                    value=module,
                )

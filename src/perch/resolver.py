"""Render function resolution.

One strategy is chosen at bootstrap and used for every request:

- ``LiveResolver`` (development): transforms the template and
  re-evaluates the server entry through the live transformer on every
  call, so source edits show up without a restart.
- ``BuildResolver`` (production): imports the precompiled server entry
  once and reuses its ``render`` for the life of the process.

Both expose ``resolve(url, template) -> (render, effective_html)``.
"""

import importlib.util
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from types import ModuleType
from typing import Any, Protocol, TypeAlias

import anyio

from perch._internal.once import OnceCell
from perch.dev.protocol import LiveTransformer
from perch.errors import RenderError
from perch.render.context import RenderContext
from perch.template import IndexTemplate

logger = logging.getLogger("perch.server")

# render(url, context) -> RenderResult | mapping, sync or async
RenderFunction: TypeAlias = Callable[[str, RenderContext], Any | Awaitable[Any]]

BUILD_MODULE_NAME = "perch_server_entry"


def render_export(module: ModuleType, source: str) -> RenderFunction:
    """Return the module's ``render`` callable or raise ``RenderError``."""
    render = getattr(module, "render", None)
    if not callable(render):
        msg = f"{source} does not export a callable 'render(url, context)'"
        raise RenderError(msg)
    return render


class Resolver(Protocol):
    async def resolve(self, url: str, template: IndexTemplate) -> tuple[RenderFunction, str]: ...


class LiveResolver:
    """Fresh template transform and module evaluation per request."""

    __slots__ = ("_entry", "_live")

    def __init__(self, live: LiveTransformer, entry: str) -> None:
        self._live = live
        self._entry = entry

    async def resolve(self, url: str, template: IndexTemplate) -> tuple[RenderFunction, str]:
        html = await self._live.transform_index_html(url, template.html)
        module = await self._live.load_module(self._entry)
        return render_export(module, self._entry), html


class BuildResolver:
    """Imports the built server entry once; every later call reuses it.

    The import runs in a worker thread. ``OnceCell`` serializes first
    access, so concurrent first requests share a single import.
    """

    __slots__ = ("_cell", "_entry_path")

    def __init__(self, entry_path: str | Path) -> None:
        self._entry_path = Path(entry_path).resolve()
        self._cell: OnceCell[RenderFunction] = OnceCell()

    @property
    def entry_path(self) -> Path:
        return self._entry_path

    async def resolve(self, url: str, template: IndexTemplate) -> tuple[RenderFunction, str]:
        if self._cell.is_set:
            render = self._cell.get_or_init(self._import_render)
        else:
            render = await anyio.to_thread.run_sync(self._cell.get_or_init, self._import_render)
        return render, template.html

    def _import_render(self) -> RenderFunction:
        path = self._entry_path
        spec = importlib.util.spec_from_file_location(BUILD_MODULE_NAME, path)
        if spec is None or spec.loader is None:
            msg = f"Cannot import server entry {path}"
            raise RenderError(msg)

        # Let the entry import sibling chunks from the build directory
        parent = str(path.parent)
        if parent not in sys.path:
            sys.path.insert(0, parent)

        module = importlib.util.module_from_spec(spec)
        sys.modules[BUILD_MODULE_NAME] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(BUILD_MODULE_NAME, None)
            raise

        logger.info("Loaded server entry %s", path)
        return render_export(module, str(path))

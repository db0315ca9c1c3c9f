"""Shared fixtures: on-disk SSR projects for both serving modes."""

import sys
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

INDEX_HTML = (
    "<!DOCTYPE html><html><head><title>App</title></head>"
    '<body><div id="app"><!--app-html--></div><!--init-props--></body></html>'
)

DEV_ENTRY = """\
async def render(url, context):
    if context.query.get("login") == "required":
        return {"redirect": "/login"}
    return {"app_html": "<p>v1 " + url + "</p>", "props_data": {"url": url}}
"""

PROD_ENTRY = """\
CALLS = []

def render(url, context):
    CALLS.append(url)
    return {"app_html": "<main>" + url + "</main>", "props_data": {"path": url}}
"""


@pytest.fixture(autouse=True)
def _isolate_imports(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> Iterator[None]:
    """Run quietly and undo the sys.modules/sys.path changes loaders make."""
    monkeypatch.setenv("PERCH_ENV", "test")
    base = tmp_path_factory.getbasetemp().resolve()
    modules = set(sys.modules)
    path = list(sys.path)
    yield
    for name in set(sys.modules) - modules:
        filename = getattr(sys.modules[name], "__file__", None)
        if name.startswith("perch_") or (filename and Path(filename).resolve().is_relative_to(base)):
            del sys.modules[name]
    sys.path[:] = path


@pytest.fixture
def write() -> Callable[[Path, str], Path]:
    """Write dedented text to *path*, creating parent directories."""

    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def dev_project(tmp_path: Path, write: Callable[[Path, str], Path]) -> Path:
    """A development project: index, server entry, public assets."""
    root = tmp_path / "web"
    write(root / "index.html", INDEX_HTML)
    write(root / "src" / "entry_server.py", DEV_ENTRY)
    write(root / "public" / "favicon.txt", "icon")
    return root


@pytest.fixture
def prod_project(tmp_path: Path, write: Callable[[Path, str], Path]) -> Path:
    """A production build: dist/client assets and dist/server entry."""
    dist = tmp_path / "dist"
    write(dist / "client" / "index.html", INDEX_HTML)
    write(dist / "client" / "assets" / "app.js", "console.log('app');")
    write(dist / "server" / "entry_server.py", PROD_ENTRY)
    return dist

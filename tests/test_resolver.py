"""Tests for perch.resolver: live and build-once render resolution."""

import sys
import types
from pathlib import Path

import pytest

from perch.errors import RenderError
from perch.resolver import BUILD_MODULE_NAME, BuildResolver, LiveResolver, render_export
from perch.template import IndexTemplate

TEMPLATE = IndexTemplate(path=Path("index.html"), html="<!--init-props--><!--app-html-->")


class TestRenderExport:
    def test_returns_callable(self) -> None:
        module = types.ModuleType("m")
        module.render = lambda url, context: None
        assert render_export(module, "m") is module.render

    def test_missing_render(self) -> None:
        with pytest.raises(RenderError, match="does not export"):
            render_export(types.ModuleType("m"), "entry.py")

    def test_non_callable_render(self) -> None:
        module = types.ModuleType("m")
        module.render = "nope"
        with pytest.raises(RenderError):
            render_export(module, "entry.py")


class TestBuildResolver:
    async def test_imports_once(self, prod_project) -> None:
        resolver = BuildResolver(prod_project / "server" / "entry_server.py")
        first, html = await resolver.resolve("/", TEMPLATE)
        second, _ = await resolver.resolve("/other", TEMPLATE)
        assert first is second
        assert html == TEMPLATE.html
        assert sys.modules[BUILD_MODULE_NAME].render is first

    async def test_failed_import_unregisters_module(self, tmp_path) -> None:
        entry = tmp_path / "entry.py"
        entry.write_text("raise ImportError('chunk missing')\n")
        resolver = BuildResolver(entry)
        with pytest.raises(ImportError):
            await resolver.resolve("/", TEMPLATE)
        assert BUILD_MODULE_NAME not in sys.modules

    async def test_entry_can_import_sibling_chunks(self, tmp_path, write) -> None:
        write(tmp_path / "server" / "perch_test_chunk.py", "MARKUP = '<chunk/>'\n")
        write(
            tmp_path / "server" / "entry.py",
            """\
            from perch_test_chunk import MARKUP

            def render(url, context):
                return {"app_html": MARKUP}
            """,
        )
        render, _ = await BuildResolver(tmp_path / "server" / "entry.py").resolve("/", TEMPLATE)
        assert render("/", None) == {"app_html": "<chunk/>"}


class TestLiveResolver:
    async def test_transforms_and_loads(self, dev_project) -> None:
        from perch.dev.server import LiveServer

        live = LiveServer(dev_project, inject_client=False)
        resolver = LiveResolver(live, "src/entry_server.py")
        render, html = await resolver.resolve("/", TEMPLATE)
        assert html == TEMPLATE.html
        assert callable(render)

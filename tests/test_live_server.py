"""Tests for perch.dev.server: the built-in live transformer."""

import logging

import pytest

from perch.dev.client import CLIENT_SNIPPET
from perch.dev.server import LiveServer
from perch.errors import BootstrapError, ModuleLoadError


class TestLoadModule:
    async def test_fresh_module_each_call(self, dev_project) -> None:
        live = LiveServer(dev_project)
        first = await live.load_module("src/entry_server.py")
        second = await live.load_module("src/entry_server.py")
        assert first is not second
        assert first.__file__ == str(dev_project.resolve() / "src" / "entry_server.py")

    async def test_dataclasses_work_in_entry(self, dev_project, write) -> None:
        write(
            dev_project / "src" / "entry_server.py",
            """\
            from dataclasses import dataclass

            @dataclass
            class Props:
                title: str

            def render(url, context):
                return {"app_html": Props("t").title}
            """,
        )
        module = await LiveServer(dev_project).load_module("src/entry_server.py")
        assert module.render("/", None) == {"app_html": "t"}

    async def test_outside_root_rejected(self, dev_project) -> None:
        with pytest.raises(ModuleLoadError, match="outside the project root"):
            await LiveServer(dev_project).load_module("../secrets.py")

    async def test_execution_error_carries_positions(self, dev_project, write) -> None:
        write(dev_project / "src" / "entry_server.py", "x = 1\ny = undefined_name\n")
        with pytest.raises(ModuleLoadError) as exc_info:
            await LiveServer(dev_project).load_module("src/entry_server.py")
        exc = exc_info.value
        assert "NameError" in str(exc)
        assert exc.id.endswith("entry_server.py")
        assert "> 2 | y = undefined_name" in exc.frame
        assert "undefined_name" in exc.plugin_code
        assert isinstance(exc.__cause__, NameError)


class TestTransformIndexHtml:
    async def test_injects_before_head_close(self, dev_project) -> None:
        html = await LiveServer(dev_project).transform_index_html("/", "<head></head><body></body>")
        assert html == f"<head>{CLIENT_SNIPPET}</head><body></body>"

    async def test_disabled(self, dev_project) -> None:
        live = LiveServer(dev_project, inject_client=False)
        assert await live.transform_index_html("/", "<head></head>") == "<head></head>"


class TestConstruction:
    def test_missing_root(self, tmp_path) -> None:
        with pytest.raises(BootstrapError):
            LiveServer(tmp_path / "missing")

    def test_quiet_under_test_runs(self, dev_project) -> None:
        LiveServer(dev_project)
        assert logging.getLogger("perch.dev").level == logging.ERROR

    def test_explicit_log_level(self, dev_project) -> None:
        LiveServer(dev_project, log_level=logging.DEBUG)
        assert logging.getLogger("perch.dev").level == logging.DEBUG

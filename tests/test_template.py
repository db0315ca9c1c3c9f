"""Tests for perch.template: loading and marker injection."""

from pathlib import Path

import pytest

from perch.errors import BootstrapError, RenderError
from perch.template import MARKUP_MARKER, STATE_MARKER, IndexTemplate, load_template


class TestLoadTemplate:
    def test_loads_valid_template(self, tmp_path) -> None:
        path = tmp_path / "index.html"
        path.write_text("<body><!--app-html--><!--init-props--></body>")
        template = load_template(path)
        assert template.path == path.resolve()
        assert template.html == "<body><!--app-html--><!--init-props--></body>"

    def test_missing_file_aborts(self, tmp_path) -> None:
        with pytest.raises(BootstrapError, match="Cannot read index template"):
            load_template(tmp_path / "missing.html")

    def test_missing_marker_aborts(self, tmp_path) -> None:
        path = tmp_path / "index.html"
        path.write_text("<body><!--app-html--></body>")
        with pytest.raises(BootstrapError, match="found 0"):
            load_template(path)

    def test_repeated_marker_aborts(self, tmp_path) -> None:
        path = tmp_path / "index.html"
        path.write_text("<!--init-props--><!--app-html--><!--app-html-->")
        with pytest.raises(BootstrapError, match="found 2"):
            load_template(path)

    def test_undecodable_file_aborts(self, tmp_path) -> None:
        path = tmp_path / "index.html"
        path.write_bytes(b"\xff\xfe<!--init-props-->")
        with pytest.raises(BootstrapError):
            load_template(path)


class TestInject:
    def _template(self, html: str) -> IndexTemplate:
        return IndexTemplate(path=Path("index.html"), html=html)

    def test_replaces_both_markers(self) -> None:
        template = self._template(f"<head>{STATE_MARKER}</head><body>{MARKUP_MARKER}</body>")
        out = template.inject(template.html, state_html="<s/>", app_html="<a/>")
        assert out == "<head><s/></head><body><a/></body>"

    def test_markup_before_state(self) -> None:
        template = self._template(f"{MARKUP_MARKER}|{STATE_MARKER}")
        assert template.inject(template.html, state_html="S", app_html="A") == "A|S"

    def test_inserted_text_is_not_rescanned(self) -> None:
        template = self._template(f"{STATE_MARKER}{MARKUP_MARKER}")
        out = template.inject(template.html, state_html=MARKUP_MARKER, app_html="<div/>")
        assert out == f"{MARKUP_MARKER}<div/>"

    def test_stored_template_is_unchanged(self) -> None:
        html = f"{STATE_MARKER}{MARKUP_MARKER}"
        template = self._template(html)
        template.inject(html, state_html="x", app_html="y")
        assert template.html == html

    def test_transformed_copy_missing_marker_is_render_error(self) -> None:
        template = self._template(f"{STATE_MARKER}{MARKUP_MARKER}")
        with pytest.raises(RenderError):
            template.inject(STATE_MARKER, state_html="x", app_html="y")

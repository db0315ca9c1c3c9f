"""Tests for perch.errors: the exception hierarchy."""

from perch.errors import BootstrapError, ConfigurationError, ModuleLoadError, PerchError, RenderError


class TestHierarchy:
    def test_all_derive_from_perch_error(self) -> None:
        for cls in (BootstrapError, ConfigurationError, ModuleLoadError, RenderError):
            assert issubclass(cls, PerchError)

    def test_module_load_error_attributes(self) -> None:
        exc = ModuleLoadError("bad", id="/a.py", frame="> 1 | x", plugin_code="x")
        assert str(exc) == "bad"
        assert (exc.id, exc.frame, exc.plugin_code) == ("/a.py", "> 1 | x", "x")

    def test_module_load_error_defaults(self) -> None:
        exc = ModuleLoadError("bad")
        assert exc.id is None
        assert exc.frame is None
        assert exc.plugin_code is None

"""Tests for perch.cli: ``perch check``."""

import pytest

from perch.cli import main


class TestPerchCheck:
    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "check" in capsys.readouterr().out

    def test_development_project_ok(self, dev_project, capsys: pytest.CaptureFixture[str]) -> None:
        main(["check", "--root", str(dev_project), "--index", str(dev_project / "index.html")])
        out = capsys.readouterr().out
        assert out.startswith("ok:")
        assert "development" in out

    def test_production_build_ok(self, prod_project, capsys: pytest.CaptureFixture[str]) -> None:
        main([
            "check",
            "--production",
            "--index",
            str(prod_project / "client" / "index.html"),
            "--dist",
            str(prod_project),
        ])
        assert "production" in capsys.readouterr().out

    def test_bad_template_exits_one(self, tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
        index = tmp_path / "index.html"
        index.write_text("<body><!--app-html--></body>")
        with pytest.raises(SystemExit) as exc_info:
            main(["check", "--root", str(tmp_path), "--index", str(index)])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_server_entry_exits_one(
        self, prod_project, capsys: pytest.CaptureFixture[str]
    ) -> None:
        (prod_project / "server" / "entry_server.py").unlink()
        with pytest.raises(SystemExit) as exc_info:
            main([
                "check",
                "--production",
                "--index",
                str(prod_project / "client" / "index.html"),
                "--dist",
                str(prod_project),
            ])
        assert exc_info.value.code == 1
        assert "Server entry" in capsys.readouterr().err

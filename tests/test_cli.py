"""
Tests for the shinline command line.
"""
import io
import json
import os
import tempfile

import pytest

import shinline


@pytest.fixture
def project(monkeypatch):
    """A project directory with util.sh and main.sh, used as working directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        with open(os.path.join(tmpdir, 'util.sh'), 'w') as f:
            f.write('function greet { echo hi }\n')
        with open(os.path.join(tmpdir, 'main.sh'), 'w') as f:
            f.write('import util\necho hi\n')
        monkeypatch.chdir(tmpdir)
        yield tmpdir


class TestBuild:
    """Tests for 'shinline build'."""

    def test_prints_source(self, project, capsys):
        shinline.main(["build", "main.sh"])
        assert capsys.readouterr().out == "util::greet() {\n   echo hi\n}\n echo hi\n"

    def test_output_file(self, project, capsys):
        shinline.main(["build", "main.sh", "-o", "out.sh"])
        with open("out.sh") as f:
            assert f.read() == "util::greet() {\n   echo hi\n}\n echo hi\n"
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "out.sh" in captured.err

    def test_stdin(self, project, capsys, monkeypatch):
        """Imports from stdin resolve against the working directory."""
        monkeypatch.setattr("sys.stdin", io.StringIO("import util\n"))
        shinline.main(["build", "-"])
        assert capsys.readouterr().out == "util::greet() {\n   echo hi\n}\n"

    def test_missing_file(self, project, capsys):
        with pytest.raises(SystemExit) as exc_info:
            shinline.main(["build", "nope.sh"])
        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().err

    def test_import_error(self, project, capsys):
        with open("broken.sh", "w") as f:
            f.write("import does-not-exist\necho hi\n")
        with pytest.raises(SystemExit) as exc_info:
            shinline.main(["build", "broken.sh"])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Import Error" in captured.err

    def test_syntax_error(self, project, capsys):
        with open("broken.sh", "w") as f:
            f.write("if true; then echo hi\n")
        with pytest.raises(SystemExit):
            shinline.main(["build", "broken.sh"])
        assert "Syntax Error" in capsys.readouterr().err

    def test_config_option(self, project, capsys):
        with open("conf.json", "w") as f:
            json.dump({"separator": "__"}, f)
        shinline.main(["--config", "conf.json", "build", "main.sh"])
        assert capsys.readouterr().out.startswith("util__greet() {")

    def test_verbose(self, project, capsys):
        try:
            shinline.main(["--verbose", "build", "main.sh"])
        finally:
            shinline.set_verbose(False)
        assert "DEBUG:" in capsys.readouterr().err


class TestOtherCommands:
    """Tests for 'ast', 'functions' and 'init'."""

    def test_ast(self, project, capsys):
        shinline.main(["ast", "main.sh"])
        tree = json.loads(capsys.readouterr().out)
        assert tree["type"] == "Script"
        assert tree["commands"][0]["name"]["text"] == "import"
        assert tree["commands"][0]["loc"]["start"]["row"] == 1

    def test_ast_resolved(self, project, capsys):
        shinline.main(["ast", "main.sh", "--resolve"])
        tree = json.loads(capsys.readouterr().out)
        assert tree["commands"][0]["type"] == "Function"
        assert tree["commands"][0]["name"]["text"] == "util::greet"

    def test_functions(self, project, capsys):
        shinline.main(["functions", "util.sh"])
        assert capsys.readouterr().out == "util::greet\t(line 1)\n"

    def test_init(self, project, capsys):
        shinline.main(["init"])
        with open("shinline.json") as f:
            assert json.load(f) == {"extension": ".sh", "separator": "::"}

        shinline.main(["init"])
        assert "already exists" in capsys.readouterr().err

    def test_no_command(self, project, capsys):
        shinline.main([])
        assert "usage" in capsys.readouterr().out

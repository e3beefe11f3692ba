"""
Unit tests for the resolver configuration.
"""
import json
import os
import tempfile

import pytest

from shast.config import ResolverConfig, find_config_file, load_config, write_default_config
from shast.errors import ConfigError


@pytest.fixture
def workdir(monkeypatch):
    """An empty working directory with an empty home."""
    with tempfile.TemporaryDirectory() as tmpdir:
        home = os.path.join(tmpdir, 'home')
        os.makedirs(home)
        project = os.path.join(tmpdir, 'project')
        os.makedirs(project)
        monkeypatch.setenv('HOME', home)
        monkeypatch.chdir(project)
        yield project


def write_json(path, data):
    with open(path, 'w') as f:
        f.write(data if isinstance(data, str) else json.dumps(data))
    return path


class TestLoadConfig:
    """Tests for load_config()."""

    def test_defaults_without_file(self, workdir):
        config = load_config()
        assert config == ResolverConfig()
        assert config.extension == ".sh"
        assert config.separator == "::"

    def test_project_file(self, workdir):
        write_json('shinline.json', {"extension": ".bash"})
        config = load_config()
        assert config.extension == ".bash"
        assert config.separator == "::"

    def test_home_file(self, workdir):
        os.makedirs(os.path.expanduser('~/.shinline'))
        write_json(os.path.expanduser('~/.shinline/config.json'), {"separator": "__"})
        assert load_config().separator == "__"

    def test_project_file_wins(self, workdir):
        write_json('shinline.json', {"separator": "."})
        os.makedirs(os.path.expanduser('~/.shinline'))
        write_json(os.path.expanduser('~/.shinline/config.json'), {"separator": "__"})
        assert load_config().separator == "."

    def test_explicit_path(self, workdir):
        path = write_json(os.path.join(workdir, 'custom.json'), {"extension": ".ksh", "separator": "-"})
        assert load_config(path) == ResolverConfig(extension=".ksh", separator="-")

    def test_missing_explicit_path(self, workdir):
        with pytest.raises(ConfigError):
            load_config(os.path.join(workdir, 'nope.json'))

    def test_invalid_json(self, workdir):
        path = write_json('shinline.json', '{\n  "extension": ".sh",\n}')
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.line_number == 3
        assert "shinline.json" in str(exc_info.value)

    def test_invalid_value(self, workdir):
        path = write_json('shinline.json', {"extension": 5})
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert "extension" in exc_info.value.context


class TestConfigFiles:
    """Tests for locating and writing configuration files."""

    def test_find_config_file(self, workdir):
        assert find_config_file() is None
        write_json('shinline.json', {})
        assert find_config_file() == 'shinline.json'

    def test_find_among_paths(self, workdir):
        second = write_json(os.path.join(workdir, 'b.json'), {})
        assert find_config_file([os.path.join(workdir, 'a.json'), second]) == second

    def test_write_default_config(self, workdir):
        config = write_default_config()
        with open('shinline.json') as f:
            assert json.load(f) == {"extension": ".sh", "separator": "::"}
        assert load_config() == config

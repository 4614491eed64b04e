"""Tests for project configuration loading."""

import json
from pathlib import Path

import pytest

from fnmap.config import (
    DEFAULT_EXCLUDES,
    DEFAULT_INCLUDE,
    FnmapConfig,
    default_project_dir,
    include_dirs,
    load_config,
    merge_config,
    validate_config,
)
from fnmap.errors import ConfigError


class TestValidateConfig:
    def test_valid(self):
        raw = {"enable": False, "include": ["src/**/*.js"], "exclude": []}
        assert validate_config(raw) is raw

    @pytest.mark.parametrize(
        "raw, message",
        [
            ([], "Config must be an object"),
            ({"enable": "yes"}, "Config.enable must be a boolean"),
            ({"include": "src"}, "Config.include must be an array"),
            ({"exclude": {"a": 1}}, "Config.exclude must be an array"),
        ],
    )
    def test_invalid(self, raw, message):
        with pytest.raises(ConfigError, match=message):
            validate_config(raw)


class TestLoadConfig:
    """Source priority and fallbacks."""

    def test_no_config(self, temp_dir: Path):
        loaded = load_config(temp_dir)
        assert loaded.config is None and loaded.source is None

    def test_fnmaprc_wins(self, temp_dir: Path):
        (temp_dir / ".fnmaprc").write_text(json.dumps({"include": ["a/**/*.js"]}))
        (temp_dir / ".fnmaprc.json").write_text(json.dumps({"include": ["b/**/*.js"]}))

        loaded = load_config(temp_dir)

        assert loaded.source == ".fnmaprc"
        assert loaded.config == {"include": ["a/**/*.js"]}

    def test_empty_file_falls_through(self, temp_dir: Path):
        (temp_dir / ".fnmaprc").write_text("  \n")
        (temp_dir / ".fnmaprc.json").write_text('{"enable": true}')

        assert load_config(temp_dir).source == ".fnmaprc.json"

    def test_invalid_json_falls_through(self, temp_dir: Path, caplog):
        (temp_dir / ".fnmaprc").write_text("{not json")
        (temp_dir / "package.json").write_text(json.dumps({"name": "x", "fnmap": {"include": ["lib/**/*.ts"]}}))

        loaded = load_config(temp_dir)

        assert loaded.source == "package.json#fnmap"
        assert "Failed to parse config file: .fnmaprc" in caplog.text

    def test_invalid_shape_falls_through(self, temp_dir: Path):
        (temp_dir / ".fnmaprc").write_text('{"enable": "no"}')
        assert load_config(temp_dir).config is None

    def test_toml_config(self, temp_dir: Path):
        (temp_dir / ".fnmaprc.toml").write_text('enable = true\ninclude = ["src/**/*.ts"]\nexclude = ["gen"]\n')

        loaded = load_config(temp_dir)

        assert loaded.source == ".fnmaprc.toml"
        assert loaded.config["exclude"] == ["gen"]

    def test_package_json_without_section(self, temp_dir: Path):
        (temp_dir / "package.json").write_text('{"name": "x"}')
        assert load_config(temp_dir).config is None


class TestMergeConfig:
    def test_defaults(self):
        config = merge_config(None)
        assert config == FnmapConfig()
        assert config.include == DEFAULT_INCLUDE

    def test_overlay(self):
        config = merge_config({"enable": False, "exclude": ["gen", "dist"]})

        assert config.enable is False
        assert config.include == DEFAULT_INCLUDE
        assert config.excludes == list(DEFAULT_EXCLUDES) + ["gen"]


def test_include_dirs():
    assert include_dirs(["src/**/*.js", "src/**/*.ts", "lib/*.js", "**/*.mjs", "app"]) == [
        "src",
        "lib",
        ".",
        "app",
    ]


def test_default_project_dir(monkeypatch, temp_dir: Path):
    monkeypatch.setenv("FNMAP_PROJECT_DIR", str(temp_dir))
    assert default_project_dir() == temp_dir

    monkeypatch.delenv("FNMAP_PROJECT_DIR")
    assert default_project_dir() == Path(".")

"""Tests for common.config module."""

import pytest

from common.config import ConfigSingleton, find_config_path, load_yaml


class TestFindConfigPath:
    def test_finds_named_config(self, tmp_path) -> None:
        (tmp_path / "test.yaml").write_text("a: 1\n")
        assert find_config_path("test", tmp_path) == tmp_path / "test.yaml"

    def test_accepts_explicit_yaml_path(self, tmp_path) -> None:
        path = tmp_path / "custom.yml"
        path.write_text("a: 1\n")
        assert find_config_path(path, tmp_path / "elsewhere") == path

    def test_raises_for_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            find_config_path("missing", tmp_path)

    def test_directory_is_not_a_config(self, tmp_path) -> None:
        (tmp_path / "odd.yaml").mkdir()
        with pytest.raises(FileNotFoundError):
            find_config_path("odd", tmp_path)


class TestLoadYaml:
    def test_loads_mapping(self, tmp_path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("fetch_delay_seconds: 5\n")
        assert load_yaml(path) == {"fetch_delay_seconds": 5}

    def test_empty_file_is_empty_dict(self, tmp_path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("")
        assert load_yaml(path) == {}

    def test_rejects_non_mapping(self, tmp_path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_yaml(path)


class TestConfigSingleton:
    def test_loads_lazily_once(self) -> None:
        calls = []

        def loader():
            calls.append(1)
            return {"n": len(calls)}

        manager = ConfigSingleton(loader)
        assert calls == []
        assert manager.get() == {"n": 1}
        assert manager.get() == {"n": 1}
        assert len(calls) == 1

    def test_set_and_reset(self) -> None:
        manager = ConfigSingleton(lambda: "loaded")
        manager.set("explicit")
        assert manager.get() == "explicit"
        manager.reset()
        assert manager.get() == "loaded"

    def test_get_without_loader_raises(self) -> None:
        with pytest.raises(RuntimeError):
            ConfigSingleton().get()

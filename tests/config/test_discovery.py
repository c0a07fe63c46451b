"""Tests for typegraph.toml discovery and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from typegraph.config.discovery import find_config, load_config


class TestFindConfig:
    @pytest.fixture(autouse=True)
    def _no_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TYPEGRAPH_CONFIG", raising=False)

    def test_finds_in_start_dir(self, tmp_path: Path) -> None:
        (tmp_path / "typegraph.toml").write_text("")
        assert find_config(tmp_path) == tmp_path / "typegraph.toml"

    def test_walks_up(self, tmp_path: Path) -> None:
        (tmp_path / "typegraph.toml").write_text("")
        child = tmp_path / "deep" / "er"
        child.mkdir(parents=True)
        assert find_config(child) == tmp_path / "typegraph.toml"

    def test_env_var_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "typegraph.toml").write_text("")
        other = tmp_path / "other.toml"
        other.write_text("")
        monkeypatch.setenv("TYPEGRAPH_CONFIG", str(other))
        assert find_config(tmp_path) == other

    def test_env_var_to_missing_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "typegraph.toml").write_text("")
        monkeypatch.setenv("TYPEGRAPH_CONFIG", str(tmp_path / "missing.toml"))
        assert find_config(tmp_path) is None


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TYPEGRAPH_CONFIG", raising=False)
        config = load_config(cwd=tmp_path)
        assert config.database.url == "sqlite:///typegraph.db"
        assert config.sync.prune is False

    def test_sparse_file(self, tmp_path: Path) -> None:
        path = tmp_path / "typegraph.toml"
        path.write_text('[sync]\ndefinitions = "my_app.types"\n')
        config = load_config(path)
        assert config.sync.definitions == "my_app.types"
        assert config.query.max_depth == 3

    def test_rejects_out_of_range(self, tmp_path: Path) -> None:
        path = tmp_path / "typegraph.toml"
        path.write_text("[query]\npage_size = 0\n")
        with pytest.raises(ValidationError):
            load_config(path)

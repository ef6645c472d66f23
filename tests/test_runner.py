"""Tests for runner.py -- full discover -> match -> copy -> save pass."""

import subprocess
from unittest.mock import patch

import pytest

from media_reflink.config import ReflinkConfig
from media_reflink.errors import ConfigError, LibraryError
from media_reflink.models import Action, FileKind
from media_reflink.runner import ReflinkRunner
from media_reflink.state import MapState


@pytest.fixture
def config(tmp_path):
    src = tmp_path / "source"
    lib = tmp_path / "library"
    # Library: one show already organized with a season folder
    (lib / "Alpha" / "Season 01").mkdir(parents=True)
    (lib / "Alpha" / "Season 01" / "ep01.mkv").write_text("v")
    (lib / "Beta").mkdir(parents=True)
    # Source: new download sharing an episode file with Alpha
    (src / "Alpha.S01.Batch").mkdir(parents=True)
    (src / "Alpha.S01.Batch" / "ep01.mkv").write_text("v")
    (src / "Unknown Show").mkdir()
    (src / "Unknown Show" / "x.mkv").write_text("v")
    return ReflinkConfig(
        _env_file=None,
        map_file=tmp_path / ".data" / "data.yaml",
        source_dir=src,
        library_dir=lib,
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def cp_ok():
    with patch("media_reflink.reflink._supports_reflink", return_value=True), patch(
        "media_reflink.reflink._run_cp",
        return_value=subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr=""),
    ) as mock_cp:
        yield mock_cp


class TestTestAction:
    def test_records_mapping(self, config, cp_ok):
        result = ReflinkRunner(config, Action.TEST).run()
        assert result.new_sources == 2
        assert result.new_targets == 2
        assert result.resolved == 1
        assert result.copied == 0
        cp_ok.assert_not_called()

        state = MapState.load(config.map_file)
        record = state.find("Alpha.S01.Batch")
        assert record.target == "Alpha"
        assert record.active
        assert state.find("Unknown Show").target == ""
        assert set(state.targets) == {"Alpha", "Beta"}

    def test_second_run_keeps_assignment(self, config, cp_ok):
        ReflinkRunner(config, Action.TEST).run()
        result = ReflinkRunner(config, Action.TEST).run()
        assert result.new_sources == 0
        assert result.resolved == 1


class TestReflinkAction:
    def test_copies_and_deactivates(self, config, cp_ok):
        result = ReflinkRunner(config, Action.REFLINK).run()
        assert result.copied == 1
        assert result.failed == 0
        cp_ok.assert_called_once_with(
            config.source_dir / "Alpha.S01.Batch", config.library_dir / "Alpha",
        )
        record = MapState.load(config.map_file).find("Alpha.S01.Batch")
        assert record.active is False

    def test_copied_records_not_requeued(self, config, cp_ok):
        ReflinkRunner(config, Action.REFLINK).run()
        result = ReflinkRunner(config, Action.REFLINK).run()
        assert result.resolved == 0
        assert cp_ok.call_count == 1

    def test_dry_run_writes_nothing(self, config, cp_ok):
        config.dry_run = True
        result = ReflinkRunner(config, Action.REFLINK).run()
        assert result.copied == 1
        cp_ok.assert_not_called()
        assert not config.map_file.exists()


class TestValidation:
    def test_same_source_and_library_rejected(self, config):
        config.library_dir = config.source_dir
        with pytest.raises(ConfigError, match="same directory"):
            ReflinkRunner(config, Action.TEST).run()
        assert not config.map_file.exists()

    def test_missing_library_raises(self, config, tmp_path):
        config.library_dir = tmp_path / "nope"
        with pytest.raises(LibraryError):
            ReflinkRunner(config, Action.TEST).run()


class TestRenewAction:
    def test_renew_reclassifies_nested(self, config, cp_ok):
        ReflinkRunner(config, Action.TEST).run()
        # Source folder reorganized into per-show subfolders
        batch = config.source_dir / "Alpha.S01.Batch"
        (batch / "ep01.mkv").unlink()
        (batch / "Season 01").mkdir()
        ReflinkRunner(config, Action.RENEW).run()
        record = MapState.load(config.map_file).find("Alpha.S01.Batch")
        assert record.kind == FileKind.NESTED
        assert [c.source for c in record.children] == ["Season 01"]
        assert record.children[0].target == "Alpha"

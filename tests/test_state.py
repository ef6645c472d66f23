"""Tests for state.py -- YAML mapping file."""

import pytest
import yaml

from media_reflink.errors import StateError
from media_reflink.models import FileKind, SourceMap
from media_reflink.state import MapState


@pytest.fixture
def state():
    return MapState(
        source_maps=[
            SourceMap(source="[Group] Show", target="Show [番剧]", kind=FileKind.DIR),
            SourceMap(source="ep.mkv.parts", kind=FileKind.SKIP),
            SourceMap(
                source="Batch",
                kind=FileKind.NESTED,
                children=[SourceMap(source="Show A", target="A", active=False)],
            ),
        ],
        targets=["Show [番剧]", "A"],
    )


class TestLoad:
    def test_missing_file_is_empty(self, tmp_path):
        state = MapState.load(tmp_path / "data.yaml")
        assert state.source_maps == []
        assert state.targets == []

    def test_empty_file_is_empty(self, tmp_path):
        path = tmp_path / "data.yaml"
        path.write_text("")
        assert MapState.load(path).source_maps == []

    def test_malformed_yaml_raises(self, tmp_path):
        path = tmp_path / "data.yaml"
        path.write_text("source_maps: [unclosed\n")
        with pytest.raises(StateError, match="Failed to read"):
            MapState.load(path)

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "data.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(StateError):
            MapState.load(path)

    def test_unknown_kind_raises(self, tmp_path):
        path = tmp_path / "data.yaml"
        path.write_text("source_maps:\n  - source: x\n    kind: symlink\n")
        with pytest.raises(StateError, match="Unknown kind"):
            MapState.load(path)

    @pytest.mark.parametrize(
        "content, message",
        [
            ("source_maps:\n  - just-a-string\n", "must be a mapping"),
            ("source_maps:\n  source: x\n", "must be a list"),
            ("targets: Alpha\n", "must be a list"),
            ("source_maps:\n  - target: T\n", "without source"),
            ("source_maps:\n  - source: x\n    active: \"false\"\n", "true or false"),
            (
                "source_maps:\n  - source: x\n    kind: nested\n    children: Show A\n",
                "must be a list",
            ),
            (
                "source_maps:\n  - source: x\n    kind: nested\n    children:\n      - 3\n",
                "must be a mapping",
            ),
        ],
    )
    def test_malformed_records_raise(self, tmp_path, content, message):
        path = tmp_path / "data.yaml"
        path.write_text(content)
        with pytest.raises(StateError, match=message):
            MapState.load(path)

    def test_active_false_is_kept(self, tmp_path):
        path = tmp_path / "data.yaml"
        path.write_text("source_maps:\n  - source: x\n    active: false\n")
        assert MapState.load(path).source_maps[0].active is False

    def test_defaults_for_missing_fields(self, tmp_path):
        path = tmp_path / "data.yaml"
        path.write_text("source_maps:\n  - source: x\n")
        record = MapState.load(path).source_maps[0]
        assert record == SourceMap(source="x", target="", active=True, kind=FileKind.DIR)


class TestSave:
    def test_save_then_load(self, tmp_path, state):
        path = tmp_path / ".data" / "data.yaml"
        state.save(path)
        assert MapState.load(path) == state

    def test_creates_parent_dir(self, tmp_path, state):
        path = tmp_path / "deep" / "dir" / "data.yaml"
        state.save(path)
        assert path.exists()

    def test_no_temp_files_left(self, tmp_path, state):
        state.save(tmp_path / "data.yaml")
        assert [p.name for p in tmp_path.iterdir()] == ["data.yaml"]

    def test_yaml_layout(self, tmp_path, state):
        path = tmp_path / "data.yaml"
        state.save(path)
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["targets"] == ["Show [番剧]", "A"]
        assert data["source_maps"][0] == {
            "source": "[Group] Show",
            "target": "Show [番剧]",
            "active": True,
            "kind": "dir",
        }
        assert data["source_maps"][2]["children"][0]["active"] is False
        assert "children" not in data["source_maps"][1]


class TestLookups:
    def test_find(self, state):
        assert state.find("Batch").kind == FileKind.NESTED
        assert state.find("missing") is None

    def test_known_sources(self, state):
        assert state.known_sources() == {"[Group] Show", "ep.mkv.parts", "Batch"}

    def test_add_target_dedupes(self, state):
        assert state.add_target("New") is True
        assert state.add_target("New") is False
        assert state.targets.count("New") == 1

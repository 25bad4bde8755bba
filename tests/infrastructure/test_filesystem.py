"""Tests for import file reading."""

import json
from pathlib import Path

import pytest

from orgctl.domain.errors import InvalidImportFile
from orgctl.infrastructure.filesystem import read_person_records


class TestReadPersonRecords:
    def test_reads_persons_list(self, tmp_path: Path) -> None:
        path = tmp_path / "in.json"
        path.write_text(json.dumps({"persons": [{"name": "Alice"}], "teams": []}))
        assert read_person_records(path) == [{"name": "Alice"}]

    def test_empty_list(self, tmp_path: Path) -> None:
        path = tmp_path / "in.json"
        path.write_text('{"persons": []}')
        assert read_person_records(path) == []

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(InvalidImportFile, match="Cannot read"):
            read_person_records(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "in.json"
        path.write_text("{persons: ")
        with pytest.raises(InvalidImportFile, match="Invalid JSON"):
            read_person_records(path)

    @pytest.mark.parametrize("payload", ['{"people": []}', '{"persons": {}}', '{"persons": ["x"]}'])
    def test_wrong_shape(self, tmp_path: Path, payload: str) -> None:
        path = tmp_path / "in.json"
        path.write_text(payload)
        with pytest.raises(InvalidImportFile, match="does not contain a 'persons' list"):
            read_person_records(path)

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from mental_math_trainer.storage import (
    LEVEL_KEY,
    STORE_PATH_ENV,
    JsonFileStore,
    LevelStore,
    MemoryStore,
)


def test_json_store_round_trips_level(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "store.json"
    LevelStore(JsonFileStore(path)).save(6)

    assert json.loads(path.read_text(encoding="utf-8")) == {LEVEL_KEY: "6"}
    assert LevelStore(JsonFileStore(path)).load() == 6
    assert not path.with_suffix(".json.tmp").exists()


def test_missing_file_reads_as_default_level(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path / "absent.json")
    assert store.get(LEVEL_KEY) is None
    assert LevelStore(store).load() == 1


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", '{"mathLevel": "many"}'])
def test_corrupt_store_falls_back_to_level_one(
    tmp_path: Path, caplog: pytest.LogCaptureFixture, content: str
) -> None:
    path = tmp_path / "store.json"
    path.write_text(content, encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="mental_math_trainer.storage"):
        level = LevelStore(JsonFileStore(path)).load()

    assert level == 1
    assert caplog.records


def test_unwritable_store_keeps_value_in_memory(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonFileStore(blocker / "store.json")

    with caplog.at_level(logging.WARNING, logger="mental_math_trainer.storage"):
        store.set(LEVEL_KEY, "3")

    assert store.get(LEVEL_KEY) == "3"
    assert "Could not write" in caplog.text


def test_default_path_honours_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(STORE_PATH_ENV, str(tmp_path / "custom.json"))
    assert JsonFileStore.default_path() == tmp_path / "custom.json"

    monkeypatch.delenv(STORE_PATH_ENV)
    assert JsonFileStore.default_path() == Path.home() / ".mental_math_trainer.json"


def test_level_store_writes_decimal_string() -> None:
    mem = MemoryStore()
    levels = LevelStore(mem)
    levels.save(12)
    assert mem.get(LEVEL_KEY) == "12"
    assert mem.writes == 1
    assert levels.load() == 12

    with pytest.raises(ValueError):
        levels.save(0)

import json

from lingonotes.internal_core.contracts import NoteEntry
from lingonotes.internal_core.note_store import InMemoryNoteStore, JsonFileNoteStore


def _sample_entries() -> list[NoteEntry]:
    return [
        NoteEntry(id="a1", original="Guten Morgen", translation="Good morning", status="completed"),
        NoteEntry(id="b2", original="Wie geht's?", translation="", status="pending"),
        NoteEntry(id="c3", original="Tschüss", translation="Error translating", status="failed"),
        NoteEntry(id="d4", original="Danke", translation="Danke", status="passthrough"),
    ]


def test_json_store_round_trip_preserves_entries_field_for_field(tmp_path) -> None:
    store = JsonFileNoteStore(tmp_path / "history.json")
    entries = _sample_entries()
    store.save(entries)
    assert store.load() == entries


def test_json_store_missing_file_loads_empty(tmp_path) -> None:
    store = JsonFileNoteStore(tmp_path / "missing" / "history.json")
    assert store.load() == []


def test_json_store_corrupt_payload_loads_empty(tmp_path) -> None:
    path = tmp_path / "history.json"
    path.write_text("{not json", encoding="utf-8")
    assert JsonFileNoteStore(path).load() == []


def test_json_store_invalid_record_loads_empty(tmp_path) -> None:
    path = tmp_path / "history.json"
    path.write_text(json.dumps([{"id": "x", "original": ""}]), encoding="utf-8")
    assert JsonFileNoteStore(path).load() == []


def test_json_store_duplicate_ids_load_empty(tmp_path) -> None:
    path = tmp_path / "history.json"
    record = {"id": "same", "original": "Hallo", "translation": "Hello", "isTranslating": False}
    path.write_text(json.dumps([record, record]), encoding="utf-8")
    assert JsonFileNoteStore(path).load() == []


def test_json_store_writes_named_slot_with_is_translating_flag(tmp_path) -> None:
    path = tmp_path / "history.json"
    JsonFileNoteStore(path, slot="lingonotes-history").save(_sample_entries())
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["slot"] == "lingonotes-history"
    flags = {item["id"]: item["isTranslating"] for item in payload["notes"]}
    assert flags == {"a1": False, "b2": True, "c3": False, "d4": False}


def test_json_store_other_slot_is_ignored(tmp_path) -> None:
    path = tmp_path / "history.json"
    JsonFileNoteStore(path, slot="other").save(_sample_entries())
    assert JsonFileNoteStore(path, slot="lingonotes-history").load() == []


def test_json_store_accepts_legacy_array_without_status(tmp_path) -> None:
    path = tmp_path / "history.json"
    path.write_text(
        json.dumps(
            [
                {"id": "1", "original": "Hallo", "translation": "Hello", "isTranslating": False},
                {"id": "2", "original": "Tag", "translation": "", "isTranslating": True},
                {"id": "3", "original": "Nacht", "translation": "Error translating", "isTranslating": False},
            ]
        ),
        encoding="utf-8",
    )
    loaded = JsonFileNoteStore(path).load()
    assert [item.status for item in loaded] == ["completed", "pending", "failed"]


def test_json_store_save_overwrites_full_snapshot(tmp_path) -> None:
    store = JsonFileNoteStore(tmp_path / "history.json")
    store.save(_sample_entries())
    store.save(_sample_entries()[:1])
    assert [item.id for item in store.load()] == ["a1"]


def test_json_store_write_failure_is_not_raised(tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    store = JsonFileNoteStore(blocker / "history.json")
    store.save(_sample_entries())
    assert store.load() == []


def test_in_memory_store_round_trip_and_corrupt_payload() -> None:
    store = InMemoryNoteStore()
    assert store.load() == []
    entries = _sample_entries()
    store.save(entries)
    assert store.load() == entries

    store.write_raw("[{]")
    assert store.load() == []


def test_json_store_non_utf8_file_loads_empty(tmp_path) -> None:
    path = tmp_path / "history.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    assert JsonFileNoteStore(path).load() == []

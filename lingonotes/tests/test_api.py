from fastapi.testclient import TestClient

from lingonotes.api.main import app
from lingonotes.internal_core.note_store import InMemoryNoteStore
from lingonotes.session.controller import NoteSessionController
from lingonotes.translation import MockTranslationProvider, TranslationClient


def _install_session(phrasebook=None, **provider_kwargs) -> tuple[NoteSessionController, InMemoryNoteStore]:
    store = InMemoryNoteStore()
    session = NoteSessionController(
        TranslationClient(MockTranslationProvider(phrasebook, **provider_kwargs)), store
    )
    app.state.note_session = session
    return session, store


def _clear_session() -> None:
    if hasattr(app.state, "note_session"):
        delattr(app.state, "note_session")


def test_healthz() -> None:
    client = TestClient(app)
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_languages_lists_supported_languages() -> None:
    client = TestClient(app)
    response = client.get("/languages")
    assert response.status_code == 200
    names = [item["name"] for item in response.json()["languages"]]
    assert names[0] == "English"
    assert "German" in names
    assert len(names) == 11


def test_submit_note_and_wait_returns_completed_entry() -> None:
    _, store = _install_session({"Guten Morgen": "Good morning"})
    try:
        with TestClient(app) as client:
            response = client.post(
                "/notes",
                json={"text": "Guten Morgen", "source_lang": "German", "target_lang": "English", "wait": True},
            )
            assert response.status_code == 200
            payload = response.json()
            assert payload["accepted"] is True
            assert payload["entry"]["original"] == "Guten Morgen"
            assert payload["entry"]["translation"] == "Good morning"
            assert payload["entry"]["status"] == "completed"
            assert payload["entry"]["is_translating"] is False

            listing = client.get("/notes").json()
            assert [item["translation"] for item in listing["notes"]] == ["Good morning"]
            assert listing["pending_count"] == 0
            assert "debug" not in listing
        assert [item.translation for item in store.load()] == ["Good morning"]
    finally:
        _clear_session()


def test_submit_note_without_wait_returns_pending_entry() -> None:
    _install_session(delay_sec=0.05)
    try:
        with TestClient(app) as client:
            response = client.post("/notes", json={"text": "Hallo"})
            entry = response.json()["entry"]
            assert entry["status"] == "pending"
            assert entry["is_translating"] is True
            assert entry["translation"] == ""
    finally:
        _clear_session()


def test_submit_blank_note_is_ignored() -> None:
    session, _ = _install_session()
    try:
        with TestClient(app) as client:
            response = client.post("/notes", json={"text": "   "})
            assert response.status_code == 200
            assert response.json() == {"accepted": False, "entry": None}
        assert session.list_entries() == []
    finally:
        _clear_session()


def test_remove_and_clear_notes() -> None:
    _install_session()
    try:
        with TestClient(app) as client:
            first = client.post("/notes", json={"text": "eins", "wait": True}).json()["entry"]
            client.post("/notes", json={"text": "zwei", "wait": True})
            client.post("/notes", json={"text": "drei", "wait": True})

            removed = client.delete(f"/notes/{first['id']}")
            assert removed.json() == {"id": first["id"], "removed": True}
            again = client.delete(f"/notes/{first['id']}")
            assert again.json() == {"id": first["id"], "removed": False}

            originals = [item["original"] for item in client.get("/notes").json()["notes"]]
            assert originals == ["zwei", "drei"]

            cleared = client.delete("/notes")
            assert cleared.json() == {"removed_count": 2}
            assert client.get("/notes").json()["notes"] == []
    finally:
        _clear_session()


def test_settings_update_clamps_font_size_and_drives_default_languages() -> None:
    session, _ = _install_session()
    try:
        with TestClient(app) as client:
            initial = client.get("/settings").json()
            assert initial["font_family"] == "sans"
            assert initial["font_family_name"] == "Inter"
            assert initial["font_size"] == 18

            updated = client.put(
                "/settings",
                json={"font_size": 500, "font_family": "serif", "is_italic": True, "target_lang": "French"},
            ).json()
            assert updated["font_size"] == 72
            assert updated["font_family_name"] == "Lora"
            assert updated["is_italic"] is True

            client.post("/notes", json={"text": "Hello", "wait": True})
        assert session.client.provider.calls == [("Hello", "English", "French")]
    finally:
        _clear_session()


def test_settings_rejects_unknown_font_family() -> None:
    _install_session()
    try:
        client = TestClient(app)
        response = client.put("/settings", json={"font_family": "comic"})
        assert response.status_code == 422
    finally:
        _clear_session()


def test_export_download_headers_and_body() -> None:
    _install_session({"Guten Morgen": "Good morning"})
    try:
        with TestClient(app) as client:
            client.post("/notes", json={"text": "Guten Morgen", "wait": True})
            response = client.get("/export/txt")
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/plain")
            disposition = response.headers["content-disposition"]
            assert disposition.startswith('attachment; filename="lingonotes_')
            assert disposition.endswith('.txt"')
            body = response.text
            assert body.startswith("LingoNotes AI - German to English\nExported on: ")
            assert body.endswith("Guten Morgen -> Good morning")

            pdf = client.get("/export/pdf")
            assert pdf.status_code == 200
            assert pdf.headers["content-type"] == "application/pdf"
            assert pdf.content.startswith(b"%PDF")
    finally:
        _clear_session()


def test_pending_count_tracks_in_flight_translations() -> None:
    _install_session(delay_sec=0.2)
    try:
        with TestClient(app) as client:
            client.post("/notes", json={"text": "Hallo"})
            listing = client.get("/notes").json()
            assert listing["pending_count"] == 1
            assert listing["notes"][0]["is_translating"] is True
    finally:
        _clear_session()


def test_undecodable_history_file_starts_with_empty_session(tmp_path, monkeypatch) -> None:
    (tmp_path / "lingonotes-history.json").write_bytes(b"\xff\xfe\x00garbage")
    monkeypatch.setenv("LINGONOTES_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LINGONOTES_TRANSLATION_PROVIDER", "mock")
    for name in ("config", "note_session"):
        if hasattr(app.state, name):
            delattr(app.state, name)
    try:
        client = TestClient(app)
        response = client.get("/notes")
        assert response.status_code == 200
        assert response.json() == {"notes": [], "pending_count": 0}
    finally:
        if hasattr(app.state, "config"):
            delattr(app.state, "config")
        _clear_session()

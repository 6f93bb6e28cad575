import asyncio

import pytest

from lingonotes.internal_core.contracts import NoteEntry
from lingonotes.internal_core.note_store import InMemoryNoteStore, JsonFileNoteStore
from lingonotes.session.controller import NoteSessionController, TranslationOutcome
from lingonotes.translation import (
    MockTranslationProvider,
    PassthroughOnFailureProvider,
    TranslationClient,
)


def _session(
    provider: MockTranslationProvider | PassthroughOnFailureProvider,
    store=None,
    **client_kwargs,
) -> NoteSessionController:
    return NoteSessionController(
        TranslationClient(provider, **client_kwargs),
        store if store is not None else InMemoryNoteStore(),
    )


def test_submit_line_appends_pending_entry_before_translation_resolves() -> None:
    async def scenario():
        provider = MockTranslationProvider({"Guten Morgen": "Good morning"})
        session = _session(provider)
        entry = session.submit_line("  Guten Morgen  ", "German", "English")
        assert entry is not None
        assert entry.original == "Guten Morgen"
        assert entry.translation == ""
        assert entry.status == "pending"
        assert [item.status for item in session.list_entries()] == ["pending"]
        assert session.pending_ids() == [entry.id]

        await session.drain()
        return entry.id, session.list_entries(), provider.calls

    entry_id, entries, calls = asyncio.run(scenario())
    assert calls == [("Guten Morgen", "German", "English")]
    assert len(entries) == 1
    assert entries[0].id == entry_id
    assert entries[0].translation == "Good morning"
    assert entries[0].status == "completed"
    assert entries[0].is_translating is False


@pytest.mark.parametrize("raw", ["", "   ", "\n\t "])
def test_submit_line_ignores_blank_input(raw: str) -> None:
    async def scenario():
        provider = MockTranslationProvider()
        session = _session(provider)
        result = session.submit_line(raw)
        await session.drain()
        return result, session.list_entries(), provider.calls

    result, entries, calls = asyncio.run(scenario())
    assert result is None
    assert entries == []
    assert calls == []


def test_submit_line_uses_settings_languages_by_default() -> None:
    async def scenario():
        provider = MockTranslationProvider()
        session = _session(provider)
        session.update_settings(source_lang="French", target_lang="Spanish")
        session.submit_line("Bonjour")
        await session.drain()
        return provider.calls

    assert asyncio.run(scenario()) == [("Bonjour", "French", "Spanish")]


def test_failed_translation_marks_only_that_entry() -> None:
    async def scenario():
        provider = MockTranslationProvider({"Hallo": "Hello"}, fail_on={"kaputt"})
        session = _session(provider)
        session.submit_line("Hallo")
        session.submit_line("kaputt")
        session.submit_line("Hallo")
        await session.drain()
        return session.list_entries()

    entries = asyncio.run(scenario())
    assert [(item.original, item.translation, item.status) for item in entries] == [
        ("Hallo", "Hello", "completed"),
        ("kaputt", "Error translating", "failed"),
        ("Hallo", "Hello", "completed"),
    ]


def test_list_order_follows_insertion_not_completion() -> None:
    class _OrderedDelayProvider(MockTranslationProvider):
        async def translate(self, text, source_lang, target_lang):
            await asyncio.sleep(0.05 if text == "first" else 0.0)
            return await super().translate(text, source_lang, target_lang)

    async def scenario():
        session = _session(_OrderedDelayProvider({"first": "1", "second": "2"}))
        session.submit_line("first")
        session.submit_line("second")
        await session.drain()
        return session.list_entries()

    entries = asyncio.run(scenario())
    assert [(item.original, item.translation) for item in entries] == [("first", "1"), ("second", "2")]


def test_remove_entry_while_translation_in_flight_discards_result() -> None:
    async def scenario():
        session = _session(MockTranslationProvider(delay_sec=0.02))
        entry = session.submit_line("Auf Wiedersehen")
        assert session.remove_entry(entry.id) is True
        await session.drain()
        return session.list_entries(), session.pending_ids()

    entries, pending = asyncio.run(scenario())
    assert entries == []
    assert pending == []


def test_remove_entry_is_idempotent() -> None:
    async def scenario():
        session = _session(MockTranslationProvider())
        keep = session.submit_line("bleiben")
        drop = session.submit_line("gehen")
        await session.drain()
        first = session.remove_entry(drop.id)
        after_first = session.list_entries()
        second = session.remove_entry(drop.id)
        after_second = session.list_entries()
        return keep.id, first, second, after_first, after_second

    keep_id, first, second, after_first, after_second = asyncio.run(scenario())
    assert first is True
    assert second is False
    assert after_first == after_second
    assert [item.id for item in after_second] == [keep_id]


def test_clear_all_empties_list_and_persists() -> None:
    store = InMemoryNoteStore()

    async def scenario():
        session = _session(MockTranslationProvider(), store=store)
        session.submit_line("eins")
        session.submit_line("zwei")
        await session.drain()
        return session.clear_all(), session.list_entries()

    removed, entries = asyncio.run(scenario())
    assert removed == 2
    assert entries == []
    assert store.load() == []


def test_every_mutation_is_persisted(tmp_path) -> None:
    store = JsonFileNoteStore(tmp_path / "history.json")

    async def scenario():
        session = _session(MockTranslationProvider({"Hallo": "Hello"}), store=store)
        entry = session.submit_line("Hallo")
        pending_snapshot = store.load()
        await session.drain()
        return entry, pending_snapshot, store.load()

    entry, pending_snapshot, final_snapshot = asyncio.run(scenario())
    assert [(item.id, item.status) for item in pending_snapshot] == [(entry.id, "pending")]
    assert [(item.id, item.translation, item.status) for item in final_snapshot] == [
        (entry.id, "Hello", "completed")
    ]


def test_timeout_surfaces_as_failed_entry() -> None:
    async def scenario():
        session = _session(MockTranslationProvider(delay_sec=1.0), timeout_sec=0.05)
        session.submit_line("langsam")
        await session.drain()
        return session.list_entries()

    entries = asyncio.run(scenario())
    assert entries[0].status == "failed"
    assert entries[0].translation == "Error translating"


def test_passthrough_is_reported_as_distinct_status() -> None:
    async def scenario():
        provider = PassthroughOnFailureProvider(MockTranslationProvider(fail_on={"Hallo"}))
        session = _session(provider)
        session.submit_line("Hallo")
        await session.drain()
        return session.list_entries()

    entries = asyncio.run(scenario())
    assert entries[0].status == "passthrough"
    assert entries[0].translation == "Hallo"


def test_unexpected_provider_exception_marks_entry_failed() -> None:
    class _CrashingProvider(MockTranslationProvider):
        async def translate(self, text, source_lang, target_lang):
            raise KeyError("boom")

    async def scenario():
        session = _session(_CrashingProvider())
        session.submit_line("Hallo")
        await session.drain()
        return session.list_entries()

    entries = asyncio.run(scenario())
    assert entries[0].status == "failed"


def test_apply_outcome_for_unknown_id_is_noop() -> None:
    session = _session(MockTranslationProvider())
    applied = session.apply_outcome(
        TranslationOutcome(entry_id="missing", status="completed", text="ignored")
    )
    assert applied is False
    assert session.list_entries() == []


def test_wait_for_returns_resolved_entry() -> None:
    async def scenario():
        session = _session(MockTranslationProvider({"Hallo": "Hello"}, delay_sec=0.01))
        entry = session.submit_line("Hallo")
        return await session.wait_for(entry.id)

    resolved = asyncio.run(scenario())
    assert resolved is not None
    assert resolved.translation == "Hello"


def test_restore_marks_stale_pending_entries_failed() -> None:
    store = InMemoryNoteStore()
    store.save(
        [
            NoteEntry(id="done", original="Hallo", translation="Hello", status="completed"),
            NoteEntry(id="stale", original="Tag", translation="", status="pending"),
        ]
    )
    session = _session(MockTranslationProvider(), store=store)
    assert session.restore() == 2
    entries = session.list_entries()
    assert [(item.id, item.status) for item in entries] == [("done", "completed"), ("stale", "failed")]
    assert entries[1].translation == "Error translating"
    assert [item.status for item in store.load()] == ["completed", "failed"]


def test_close_cancels_in_flight_translations() -> None:
    async def scenario():
        session = _session(MockTranslationProvider(delay_sec=5.0), timeout_sec=None)
        session.submit_line("ewig")
        await session.close()
        return session.pending_ids(), session.list_entries()

    pending, entries = asyncio.run(scenario())
    assert pending == []
    assert entries[0].status == "pending"


def test_change_listener_receives_snapshots_and_errors_are_contained() -> None:
    seen: list[int] = []

    def listener(entries):
        seen.append(len(entries))
        raise RuntimeError("listener failure must not escape")

    async def scenario():
        session = NoteSessionController(
            TranslationClient(MockTranslationProvider()), InMemoryNoteStore(), on_change=listener
        )
        session.submit_line("Hallo")
        await session.drain()
        session.clear_all()

    asyncio.run(scenario())
    assert seen == [1, 1, 0]


def test_update_settings_clamps_font_size() -> None:
    session = _session(MockTranslationProvider())
    assert session.update_settings(font_size=200).font_size == 72
    assert session.update_settings(font_size=1).font_size == 8
    updated = session.update_settings(font_family="mono", is_bold=True)
    assert updated.font_family_name == "JetBrains Mono"
    assert updated.is_bold is True
    assert updated.font_size == 8

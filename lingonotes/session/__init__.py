"""
Note session boundary for LingoNotes backend.

Design intent:
- One explicit session object owns the note list; no ambient singleton.
- Translation results are reconciled by entry id, never by position.
"""

from .controller import NoteSessionController, NoteStore, TranslationOutcome

__all__ = ["NoteSessionController", "NoteStore", "TranslationOutcome"]

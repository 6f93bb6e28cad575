from .config import AppConfig, load_config
from .note_store import InMemoryNoteStore, JsonFileNoteStore

__all__ = ["AppConfig", "load_config", "InMemoryNoteStore", "JsonFileNoteStore"]

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

NoteStatus = Literal["pending", "completed", "failed", "passthrough"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"completed", "failed", "passthrough"})

TRANSLATION_ERROR_TEXT = "Error translating"

FontFamilyKey = Literal["sans", "serif", "mono"]

FONT_FAMILIES: dict[str, str] = {
    "sans": "Inter",
    "serif": "Lora",
    "mono": "JetBrains Mono",
}

FONT_SIZE_MIN = 8
FONT_SIZE_MAX = 72


class NoteEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    original: str = Field(min_length=1)
    translation: str = ""
    status: NoteStatus = "pending"

    @property
    def is_translating(self) -> bool:
        return self.status == "pending"

    def to_record(self) -> dict[str, object]:
        return {
            "id": self.id,
            "original": self.original,
            "translation": self.translation,
            "isTranslating": self.is_translating,
            "status": self.status,
        }


def clamp_font_size(value: int) -> int:
    return max(FONT_SIZE_MIN, min(FONT_SIZE_MAX, int(value)))


class EditorSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    font_family: FontFamilyKey = "sans"
    font_size: int = 18
    is_bold: bool = False
    is_italic: bool = False
    source_lang: str = Field(default="English", min_length=1, max_length=64)
    target_lang: str = Field(default="German", min_length=1, max_length=64)

    @field_validator("font_size", mode="before")
    @classmethod
    def _clamp_font_size(cls, value: object) -> int:
        return clamp_font_size(int(value))  # type: ignore[arg-type]

    @property
    def font_family_name(self) -> str:
        return FONT_FAMILIES[self.font_family]


class Language(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str


LANGUAGES: tuple[Language, ...] = (
    Language(code="en", name="English"),
    Language(code="es", name="Spanish"),
    Language(code="fr", name="French"),
    Language(code="de", name="German"),
    Language(code="it", name="Italian"),
    Language(code="pt", name="Portuguese"),
    Language(code="ru", name="Russian"),
    Language(code="ja", name="Japanese"),
    Language(code="ko", name="Korean"),
    Language(code="zh", name="Chinese"),
    Language(code="ar", name="Arabic"),
)


def language_code(name: str) -> str | None:
    """Map a display name (case-insensitive) or an ISO code to its ISO code."""
    normalized = str(name or "").strip().lower()
    if not normalized:
        return None
    for item in LANGUAGES:
        if normalized in {item.name.lower(), item.code}:
            return item.code
    return None

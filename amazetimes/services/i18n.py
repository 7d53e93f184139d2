"""Bilingual (English/Tamil) text resolution and language preference.

Every bilingual attribute is stored as two columns, ``<name>_en`` and
``<name>_ta``. Views never pick a column themselves: they receive a
``LanguageContext`` and ask it for the active-language value.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, MutableMapping, Optional, Protocol

logger = logging.getLogger(__name__)

PREFERENCE_KEY = "amazetimes-language"


class Language(str, Enum):
    """Supported display languages."""

    EN = "en"
    TA = "ta"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Language"]:
        """Return the language for a raw value, or None if it is not supported."""
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None


DEFAULT_LANGUAGE = Language.EN


def resolve_text(language: Language, value_en: str, value_ta: str) -> str:
    """Return the Tamil value when Tamil is active, otherwise the English one."""
    return value_ta if language == Language.TA else value_en


def resolve_field(language: Language, record: Any, field: str) -> str:
    """Resolve a ``<field>_en``/``<field>_ta`` pair on a mapping or an object.

    A missing or null variant resolves to an empty string.
    """
    suffix = "ta" if language == Language.TA else "en"
    name = f"{field}_{suffix}"
    if isinstance(record, Mapping):
        value = record.get(name)
    else:
        value = getattr(record, name, None)
    return value or ""


@dataclass(frozen=True)
class LanguageContext:
    """Active display language, passed explicitly into every view."""

    language: Language = DEFAULT_LANGUAGE

    @property
    def is_tamil(self) -> bool:
        return self.language == Language.TA

    @property
    def code(self) -> str:
        return self.language.value

    def t(self, value_en: str, value_ta: str) -> str:
        return resolve_text(self.language, value_en, value_ta)

    def field(self, record: Any, name: str) -> str:
        return resolve_field(self.language, record, name)


class PreferenceStorage(Protocol):
    """Key-value storage the preference is persisted to."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """Dict-backed preference storage (CLI tools and tests)."""

    def __init__(self, data: Optional[MutableMapping[str, str]] = None):
        self.data = data if data is not None else {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class CookieStorage:
    """Preference storage backed by the browser's cookies.

    Reads come from the incoming request cookies; writes are staged on the
    outgoing response so the browser keeps them for the next session.
    """

    def __init__(self, cookies: Mapping[str, str], response=None, max_age: int = 365 * 24 * 3600):
        self._cookies = dict(cookies)
        self._response = response
        self._max_age = max_age

    def get(self, key: str) -> Optional[str]:
        return self._cookies.get(key)

    def set(self, key: str, value: str) -> None:
        self._cookies[key] = value
        if self._response is not None:
            self._response.set_cookie(
                key, value, max_age=self._max_age, httponly=False, samesite="lax"
            )


class LanguagePreferenceStore:
    """Owner of the current display language.

    Initialised from persisted storage (absent or invalid values fall back
    to English) and persisted again on every change.
    """

    def __init__(self, storage: PreferenceStorage, key: str = PREFERENCE_KEY):
        self._storage = storage
        self._key = key
        persisted = storage.get(key)
        language = Language.parse(persisted)
        if language is None:
            if persisted is not None:
                logger.debug("Ignoring invalid persisted language %r", persisted)
            language = DEFAULT_LANGUAGE
        self._language = language

    @property
    def language(self) -> Language:
        return self._language

    def context(self) -> LanguageContext:
        return LanguageContext(self._language)

    def set_language(self, language) -> Language:
        """Switch the display language and persist it.

        Raises:
            ValueError: If ``language`` is not one of the supported codes.
        """
        parsed = language if isinstance(language, Language) else Language.parse(language)
        if parsed is None:
            raise ValueError(f"Unsupported language: {language!r}")
        self._language = parsed
        self._storage.set(self._key, parsed.value)
        return parsed

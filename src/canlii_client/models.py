"""Record types returned by the CanLII client.

Records are plain frozen dataclasses built from one parsed API response.
The API key that produced a record rides along in ``api_key``, together with
the client's ``language`` and ``base_url``, so that a downstream call
(metadata, citator) can reuse them. These context fields are excluded from
``repr``, equality and :meth:`to_dict`.

Case and legislation ids come back from the API either as a plain string
(``"1918canlii290"``) or wrapped in a language tag (``{"en": "1918canlii290"}``).
Both forms are kept as an :class:`Identifier`; :func:`normalize_identifier`
turns either into the bare id used in URL paths.
"""

from dataclasses import dataclass, field

from canlii_client.errors import ValidationError
from canlii_client.urls import BASE_URL, DEFAULT_LANGUAGE


@dataclass(frozen=True)
class PlainId:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TaggedId:
    language: str
    value: str

    def __str__(self) -> str:
        return self.value


Identifier = PlainId | TaggedId


def parse_identifier(raw) -> Identifier:
    """Parse a raw ``caseId``/``legislationId`` value from the API."""
    if isinstance(raw, (PlainId, TaggedId)):
        return raw
    if isinstance(raw, str):
        return PlainId(raw)
    if isinstance(raw, dict) and len(raw) == 1:
        ((language, value),) = raw.items()
        if isinstance(language, str) and len(language) == 2 and isinstance(value, str):
            return TaggedId(language, value)
    raise ValidationError(f"Unrecognised identifier: {raw!r}")


def normalize_identifier(raw) -> str:
    """Return the bare id string, whichever language tag (if any) wraps it."""
    return parse_identifier(raw).value


@dataclass(frozen=True)
class CaseDatabase:
    database_id: str
    jurisdiction: str
    name: str
    api_key: str = field(default="", repr=False, compare=False)
    language: str = field(default=DEFAULT_LANGUAGE, repr=False, compare=False)
    base_url: str = field(default=BASE_URL, repr=False, compare=False)

    def to_dict(self) -> dict:
        return {
            "databaseId": self.database_id,
            "jurisdiction": self.jurisdiction,
            "name": self.name,
        }


@dataclass(frozen=True)
class LegislationDatabase:
    database_id: str
    jurisdiction: str
    name: str
    type: str
    api_key: str = field(default="", repr=False, compare=False)
    language: str = field(default=DEFAULT_LANGUAGE, repr=False, compare=False)
    base_url: str = field(default=BASE_URL, repr=False, compare=False)

    def to_dict(self) -> dict:
        return {
            "databaseId": self.database_id,
            "jurisdiction": self.jurisdiction,
            "name": self.name,
            "type": self.type,
        }


@dataclass(frozen=True)
class CaseSummary:
    database_id: str
    case_id: Identifier
    title: str
    citation: str
    api_key: str = field(default="", repr=False, compare=False)
    language: str = field(default=DEFAULT_LANGUAGE, repr=False, compare=False)
    base_url: str = field(default=BASE_URL, repr=False, compare=False)

    @property
    def id(self) -> str:
        return self.case_id.value

    def to_dict(self) -> dict:
        return {
            "databaseId": self.database_id,
            "caseId": self.id,
            "title": self.title,
            "citation": self.citation,
        }


@dataclass(frozen=True)
class LegislationSummary:
    database_id: str
    legislation_id: Identifier
    title: str
    citation: str
    type: str
    api_key: str = field(default="", repr=False, compare=False)
    language: str = field(default=DEFAULT_LANGUAGE, repr=False, compare=False)
    base_url: str = field(default=BASE_URL, repr=False, compare=False)

    @property
    def id(self) -> str:
        return self.legislation_id.value

    def to_dict(self) -> dict:
        return {
            "databaseId": self.database_id,
            "legislationId": self.id,
            "title": self.title,
            "citation": self.citation,
            "type": self.type,
        }

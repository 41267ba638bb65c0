"""Turn CanLII JSON responses into flat records.

Collection endpoints wrap their items in a single key (``caseDatabases``,
``legislationDatabases``, ``cases``, ``legislations``). Items are projected
field by field, in the order the API returned them, and each record gets
the caller's API key, language and base URL attached. Metadata and citator
responses are not modelled and are handed back as received.
"""

from canlii_client.errors import MalformedResponse, ValidationError
from canlii_client.models import (
    CaseDatabase,
    CaseSummary,
    LegislationDatabase,
    LegislationSummary,
    parse_identifier,
)
from canlii_client.urls import BASE_URL, DEFAULT_LANGUAGE


def _items(payload, key: str) -> list[dict]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        return payload.get(key) or []
    return []


def _identifier(item: dict, key: str):
    try:
        return parse_identifier(item.get(key, ""))
    except ValidationError as e:
        raise MalformedResponse(f"Unexpected {key} in response: {item.get(key)!r}") from e


def shape_case_databases(
    payload, api_key: str, language: str = DEFAULT_LANGUAGE, base_url: str = BASE_URL
) -> list[CaseDatabase]:
    return [
        CaseDatabase(
            database_id=item.get("databaseId", ""),
            jurisdiction=item.get("jurisdiction", ""),
            name=item.get("name", ""),
            api_key=api_key,
            language=language,
            base_url=base_url,
        )
        for item in _items(payload, "caseDatabases")
    ]


def shape_legislation_databases(
    payload, api_key: str, language: str = DEFAULT_LANGUAGE, base_url: str = BASE_URL
) -> list[LegislationDatabase]:
    return [
        LegislationDatabase(
            database_id=item.get("databaseId", ""),
            jurisdiction=item.get("jurisdiction", ""),
            name=item.get("name", ""),
            type=item.get("type", ""),
            api_key=api_key,
            language=language,
            base_url=base_url,
        )
        for item in _items(payload, "legislationDatabases")
    ]


def shape_cases(
    payload, api_key: str, language: str = DEFAULT_LANGUAGE, base_url: str = BASE_URL
) -> list[CaseSummary]:
    return [
        CaseSummary(
            database_id=item.get("databaseId", ""),
            case_id=_identifier(item, "caseId"),
            title=item.get("title", ""),
            citation=item.get("citation", ""),
            api_key=api_key,
            language=language,
            base_url=base_url,
        )
        for item in _items(payload, "cases")
    ]


def shape_legislations(
    payload, api_key: str, language: str = DEFAULT_LANGUAGE, base_url: str = BASE_URL
) -> list[LegislationSummary]:
    return [
        LegislationSummary(
            database_id=item.get("databaseId", ""),
            legislation_id=_identifier(item, "legislationId"),
            title=item.get("title", ""),
            citation=item.get("citation", ""),
            type=item.get("type", ""),
            api_key=api_key,
            language=language,
            base_url=base_url,
        )
        for item in _items(payload, "legislations")
    ]


def citation_edges(payload, cite_type: str) -> list[dict]:
    """Return the reference list of a citator response, items untouched."""
    return _items(payload, cite_type)

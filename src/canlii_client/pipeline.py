"""Chain CanLII calls using the context carried by upstream records.

Example::

    client = CanLIIClient(api_key, language="fr")
    db = next(d for d in client.list_case_databases() if d.database_id == "qccs")
    cases = cases_in(db, result_count=10)
    metadata = metadata_for(cases[0])

Each helper opens a client with the record's API key, language and base URL,
makes one call and closes it again; nothing is shared or cached between
calls. Pass ``language`` to override the record's language.
"""

from canlii_client import urls
from canlii_client.client import CanLIIClient
from canlii_client.models import (
    CaseDatabase,
    CaseSummary,
    LegislationDatabase,
    LegislationSummary,
)


def _client_for(record, language: str | None = None) -> CanLIIClient:
    return CanLIIClient(
        api_key=record.api_key,
        language=language or record.language,
        base_url=record.base_url,
    )


def cases_in(
    database: CaseDatabase,
    date_filter: urls.DateFilter | None = None,
    result_count: int = urls.MAX_RESULT_COUNT,
    language: str | None = None,
) -> list[CaseSummary]:
    with _client_for(database, language) as client:
        return client.browse_cases(
            database.database_id, date_filter=date_filter, result_count=result_count
        )


def legislation_in(
    database: LegislationDatabase, language: str | None = None
) -> list[LegislationSummary]:
    with _client_for(database, language) as client:
        return client.browse_legislation(database.database_id)


def metadata_for(
    summary: CaseSummary | LegislationSummary, language: str | None = None
) -> dict:
    with _client_for(summary, language) as client:
        if isinstance(summary, LegislationSummary):
            return client.get_legislation_metadata(
                summary.database_id, summary.legislation_id
            )
        return client.get_case_metadata(summary.database_id, summary.case_id)


def citations_for(
    case: CaseSummary, cite_type: str, language: str | None = None
) -> list[dict]:
    with _client_for(case, language) as client:
        return client.get_case_citator(case.database_id, case.case_id, cite_type)

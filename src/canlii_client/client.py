import logging

from canlii_client import urls
from canlii_client.errors import ValidationError
from canlii_client.http_client import HttpBaseClient
from canlii_client.models import (
    CaseDatabase,
    CaseSummary,
    LegislationDatabase,
    LegislationSummary,
    normalize_identifier,
)
from canlii_client.shaping import (
    citation_edges,
    shape_case_databases,
    shape_cases,
    shape_legislation_databases,
    shape_legislations,
)

logger = logging.getLogger(__name__)


class CanLIIClient(HttpBaseClient):
    """Client for the CanLII REST API.

    Every public method validates its arguments, builds one URL, issues one
    GET and shapes the response. List results carry this client's API key,
    language and base URL so they can be passed straight to
    :mod:`canlii_client.pipeline`.
    """

    def __init__(
        self,
        api_key: str,
        language: str = urls.DEFAULT_LANGUAGE,
        base_url: str = urls.BASE_URL,
    ):
        if not api_key:
            raise ValidationError("API key is required")
        super().__init__()
        self.api_key = api_key
        self.language = urls.validate_language(language)
        self.base_url = base_url

        logger.debug("Initialized CanLII client (language=%s)", self.language)

    def _context(self) -> dict:
        """Request context attached to list results for downstream calls."""
        return {
            "api_key": self.api_key,
            "language": self.language,
            "base_url": self.base_url,
        }

    def _url(self, kind: str, **kwargs) -> str:
        return urls.build_url(
            kind,
            self.api_key,
            language=self.language,
            base_url=self.base_url,
            **kwargs,
        )

    # --- Databases ---

    def list_case_databases(self) -> list[CaseDatabase]:
        data = self._get_json(self._url("case-databases"))
        databases = shape_case_databases(data, **self._context())
        logger.info("Found %d case database(s).", len(databases))
        return databases

    def list_legislation_databases(self) -> list[LegislationDatabase]:
        data = self._get_json(self._url("legislation-databases"))
        databases = shape_legislation_databases(data, **self._context())
        logger.info("Found %d legislation database(s).", len(databases))
        return databases

    # --- Browse ---

    def browse_cases(
        self,
        database_id: str,
        date_filter: urls.DateFilter | None = None,
        result_count: int = urls.MAX_RESULT_COUNT,
    ) -> list[CaseSummary]:
        """List the cases of one database, optionally within a date range.

        Only the first *result_count* cases (at most 10000) are returned;
        the API's offset is not paged through.
        """
        params = urls.case_browse_params(date_filter, result_count)
        data = self._get_json(
            self._url("case-browse", database_id=database_id, params=params)
        )
        cases = shape_cases(data, **self._context())
        logger.info("Found %d case(s) in %s.", len(cases), database_id)
        return cases

    def browse_legislation(self, database_id: str) -> list[LegislationSummary]:
        data = self._get_json(self._url("legislation-browse", database_id=database_id))
        items = shape_legislations(data, **self._context())
        logger.info("Found %d legislation item(s) in %s.", len(items), database_id)
        return items

    # --- Metadata ---

    def get_case_metadata(self, database_id: str, case_id) -> dict:
        return self._get_json(
            self._url(
                "case-metadata",
                database_id=database_id,
                item_id=normalize_identifier(case_id),
            )
        )

    def get_legislation_metadata(self, database_id: str, legislation_id) -> dict:
        return self._get_json(
            self._url(
                "legislation-metadata",
                database_id=database_id,
                item_id=normalize_identifier(legislation_id),
            )
        )

    # --- Citator ---

    def get_case_citator(self, database_id: str, case_id, cite_type: str) -> list[dict]:
        """Return the cases or legislation related to one case.

        *cite_type* is one of ``citedCases``, ``citingCases`` or
        ``citedLegislations``.
        """
        data = self._get_json(
            self._url(
                "case-citator",
                database_id=database_id,
                item_id=normalize_identifier(case_id),
                cite_type=cite_type,
            )
        )
        return citation_edges(data, cite_type)

    @classmethod
    def from_settings(cls, api_key: str = "", language: str = "") -> "CanLIIClient":
        from canlii_client import settings

        api_key = api_key or settings.CANLII_API_KEY
        if not api_key:
            raise ValueError("CANLII_API_KEY is not set")

        return cls(
            api_key=api_key,
            language=language or settings.CANLII_LANGUAGE,
            base_url=settings.CANLII_API_URL,
        )

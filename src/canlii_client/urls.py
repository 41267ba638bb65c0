"""URL construction for the CanLII REST API.

API docs: https://github.com/canlii/API_documentation/blob/master/EN.md

Endpoints
---------
::

    GET /v1/caseBrowse/{lang}/                                   case databases
    GET /v1/legislationBrowse/{lang}/                            legislation databases
    GET /v1/caseBrowse/{lang}/{databaseId}/                      cases in a database
    GET /v1/legislationBrowse/{lang}/{databaseId}/               legislation in a database
    GET /v1/caseBrowse/{lang}/{databaseId}/{caseId}/             case metadata
    GET /v1/legislationBrowse/{lang}/{databaseId}/{legislationId}/  legislation metadata
    GET /v1/caseCitator/en/{databaseId}/{caseId}/{citeType}      citator

All endpoints authenticate with the ``api_key`` query parameter.

Case browse takes ``offset`` and ``resultCount`` (1-10000) plus at most one
pair of date bounds (``publishedBefore/After``, ``modifiedBefore/After``,
``changedBefore/After``, ``decisionDateBefore/After``), all ``YYYY-MM-DD``.

Everything here is pure: arguments are validated before a URL is returned,
so a bad call never reaches the network.
"""

from dataclasses import dataclass
from datetime import date, datetime
from urllib.parse import urlencode

from canlii_client.errors import ValidationError

BASE_URL = "https://api.canlii.org/v1/"

LANGUAGES = ("en", "fr")
DEFAULT_LANGUAGE = "en"
# The citator is only served in English.
CITATOR_LANGUAGE = "en"

CITE_TYPES = ("citedCases", "citingCases", "citedLegislations")

MIN_RESULT_COUNT = 1
MAX_RESULT_COUNT = 10000

# kind -> (resource, needs database id, needs item id)
_KINDS = {
    "case-databases": ("caseBrowse", False, False),
    "legislation-databases": ("legislationBrowse", False, False),
    "case-browse": ("caseBrowse", True, False),
    "legislation-browse": ("legislationBrowse", True, False),
    "case-metadata": ("caseBrowse", True, True),
    "legislation-metadata": ("legislationBrowse", True, True),
    "case-citator": ("caseCitator", True, True),
}


def parse_date(value) -> date:
    """Coerce *value* to a :class:`date`, accepting ``YYYY-MM-DD`` strings."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            pass
    raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


# --- Date filters for case browse ---


@dataclass(frozen=True)
class NoFilter:
    def params(self) -> dict:
        return {}


@dataclass(frozen=True)
class _DateRange:
    after: date
    before: date

    PARAM = ""

    def __post_init__(self):
        # Accept YYYY-MM-DD strings
        object.__setattr__(self, "after", parse_date(self.after))
        object.__setattr__(self, "before", parse_date(self.before))
        if self.after > self.before:
            raise ValidationError(
                f"{self.PARAM}After ({self.after}) is later than "
                f"{self.PARAM}Before ({self.before})"
            )

    def params(self) -> dict:
        return {
            f"{self.PARAM}After": self.after.isoformat(),
            f"{self.PARAM}Before": self.before.isoformat(),
        }


@dataclass(frozen=True)
class PublishedRange(_DateRange):
    PARAM = "published"


@dataclass(frozen=True)
class ModifiedRange(_DateRange):
    PARAM = "modified"


@dataclass(frozen=True)
class ChangedRange(_DateRange):
    PARAM = "changed"


@dataclass(frozen=True)
class DecisionDateRange(_DateRange):
    PARAM = "decisionDate"


DateFilter = NoFilter | PublishedRange | ModifiedRange | ChangedRange | DecisionDateRange

_FILTER_OPTIONS = {
    "published": PublishedRange,
    "modified": ModifiedRange,
    "changed": ChangedRange,
    "decision_date": DecisionDateRange,
}


def date_filter_from_options(
    published: tuple | None = None,
    modified: tuple | None = None,
    changed: tuple | None = None,
    decision_date: tuple | None = None,
) -> DateFilter:
    """Build a date filter from optional ``(after, before)`` pairs.

    At most one pair may be given, and it must carry both bounds.
    """
    given = {
        name: bounds
        for name, bounds in (
            ("published", published),
            ("modified", modified),
            ("changed", changed),
            ("decision_date", decision_date),
        )
        if bounds
    }
    if not given:
        return NoFilter()
    if len(given) > 1:
        raise ValidationError(
            "Only one date filter may be used at a time, got: "
            + ", ".join(sorted(given))
        )
    ((name, bounds),) = given.items()
    if len(bounds) != 2 or not bounds[0] or not bounds[1]:
        raise ValidationError(f"Date filter {name!r} needs both an after and a before date")
    return _FILTER_OPTIONS[name](bounds[0], bounds[1])


# --- Validation ---


def validate_language(language: str) -> str:
    if language not in LANGUAGES:
        raise ValidationError(
            f"Unsupported language {language!r} (expected one of {', '.join(LANGUAGES)})"
        )
    return language


def validate_result_count(result_count: int) -> int:
    if isinstance(result_count, bool) or not isinstance(result_count, int):
        raise ValidationError(f"resultCount must be an integer, got {result_count!r}")
    if not MIN_RESULT_COUNT <= result_count <= MAX_RESULT_COUNT:
        raise ValidationError(
            f"resultCount must be between {MIN_RESULT_COUNT} and {MAX_RESULT_COUNT}, "
            f"got {result_count}"
        )
    return result_count


def _require(value, label: str) -> str:
    if not value:
        raise ValidationError(f"{label} is required")
    return str(value)


def case_browse_params(
    date_filter: DateFilter | None = None,
    result_count: int = MAX_RESULT_COUNT,
) -> dict:
    """Query parameters for a case browse.

    ``offset`` is always 0: only the first ``result_count`` cases of a
    database can be reached.
    """
    params = {"offset": 0, "resultCount": validate_result_count(result_count)}
    params.update((date_filter or NoFilter()).params())
    return params


def build_url(
    kind: str,
    api_key: str,
    language: str = DEFAULT_LANGUAGE,
    database_id: str | None = None,
    item_id: str | None = None,
    cite_type: str | None = None,
    params: dict | None = None,
    base_url: str = BASE_URL,
) -> str:
    """Return the full request URL for one API operation.

    ``item_id`` must already be normalized (see
    :func:`canlii_client.models.normalize_identifier`); it is inserted into
    the path as-is.
    """
    if kind not in _KINDS:
        raise ValidationError(f"Unknown operation {kind!r}")
    resource, needs_db, needs_item = _KINDS[kind]

    api_key = _require(api_key, "API key")
    language = validate_language(language)

    if kind == "case-citator":
        if cite_type not in CITE_TYPES:
            raise ValidationError(
                f"Unsupported cite type {cite_type!r} (expected one of {', '.join(CITE_TYPES)})"
            )
        language = CITATOR_LANGUAGE

    segments = [resource, language]
    if needs_db:
        segments.append(_require(database_id, "Database id"))
    if needs_item:
        segments.append(_require(item_id, "Item id"))

    path = "/".join(segments)
    if kind == "case-citator":
        path += f"/{cite_type}"
    else:
        path += "/"

    query = {"api_key": api_key}
    if params:
        query.update(params)

    return f"{base_url.rstrip('/')}/{path}?{urlencode(query)}"

import json
import os
import re

from canlii_client.sinks.base import Sink

_ID_KEYS = ("caseId", "legislationId", "databaseId")


def _sanitize_filename(name: str) -> str:
    """Replace unsafe characters with underscores, collapse duplicates."""
    if not name:
        return "unnamed"
    result = re.sub(r'[/\\<>:"|?*\s]', "_", name)
    result = re.sub(r"_+", "_", result)
    result = result.strip("_.")
    return result or "unnamed"


def _record_id(record: dict) -> str:
    for key in _ID_KEYS:
        value = record.get(key)
        if isinstance(value, dict) and len(value) == 1:
            # Language-tagged id, e.g. {"en": "2008scc9"}
            value = next(iter(value.values()))
        if value:
            return str(value)
    return "unknown"


class JSONFileSink(Sink):
    """Sink that writes each record as a JSON file in a directory tree.

    Layout: ``<output_dir>/<kind>/<databaseId>/<id>.json``. Database
    listings have no parent database and go to ``<output_dir>/<kind>/``.
    """

    def __init__(self, output_dir: str):
        self.output_dir = output_dir

    def _write_json(self, path: str, data: dict) -> None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def path_for(self, kind: str, record: dict) -> str:
        name = f"{_sanitize_filename(_record_id(record))}.json"
        parts = [self.output_dir, _sanitize_filename(kind)]
        if kind != "databases" and record.get("databaseId"):
            parts.append(_sanitize_filename(record["databaseId"]))
        return os.path.join(*parts, name)

    def write(self, kind: str, record: dict) -> None:
        self._write_json(self.path_for(kind, record), record)

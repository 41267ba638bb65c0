import csv
import json

from canlii_client.sinks.base import Sink


def _cell(value):
    """Nested values (keywords lists, tagged ids) are stored as JSON text."""
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return value


class CSVSink(Sink):
    """Sink that writes records as CSV rows to an open text stream.

    The header is written before the first row. Columns default to the keys
    of the first record; keys missing from a later record are left empty and
    extra keys are dropped.
    """

    def __init__(self, stream, columns: list[str] | None = None):
        self.stream = stream
        self.columns = columns
        self._writer = None

    def write(self, kind: str, record: dict) -> None:
        if self._writer is None:
            if self.columns is None:
                self.columns = list(record.keys())
            self._writer = csv.DictWriter(
                self.stream, fieldnames=self.columns, extrasaction="ignore"
            )
            self._writer.writeheader()
        self._writer.writerow({col: _cell(record.get(col, "")) for col in self.columns})

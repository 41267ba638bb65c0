import io
import json
import subprocess
import sys

import pytest

from canlii_client.cli import (
    EXIT_ERROR,
    EXIT_QUOTA,
    EXIT_VALIDATION,
    cmd_cases,
    cmd_citator,
    cmd_databases,
    cmd_legislation,
    cmd_metadata,
    run_command,
)

from conftest import FakeResponse


def _run_cli(*argv, **kwargs):
    return subprocess.run(
        [sys.executable, "-m", "canlii_client.cli", *argv],
        capture_output=True,
        text=True,
        **kwargs,
    )


def test_cli_help():
    result = _run_cli("--help")
    assert result.returncode == 0
    for command in ("databases", "cases", "legislation", "metadata", "citator"):
        assert command in result.stdout


def test_cli_cases_help():
    result = _run_cli("cases", "--help")
    assert result.returncode == 0
    for option in ("--result-count", "--published", "--modified", "--changed", "--decision-date"):
        assert option in result.stdout


def test_cli_no_command():
    result = _run_cli()
    assert result.returncode == 1


def test_cli_cases_requires_database_id():
    result = _run_cli("cases")
    assert result.returncode != 0
    assert "database_id" in result.stderr


def test_cli_citator_rejects_cite_type():
    result = _run_cli("citator", "citedThings", "csc-scc", "2008scc9")
    assert result.returncode != 0
    assert "citedCases" in result.stderr


def test_cli_conflicting_filters_fail_before_network():
    result = _run_cli(
        "--api-key",
        "K",
        "cases",
        "sklgb",
        "--published",
        "2020-01-01",
        "2020-12-31",
        "--modified",
        "2020-01-01",
        "2020-12-31",
    )
    assert result.returncode == EXIT_VALIDATION
    assert "Only one date filter" in result.stderr


# --- Command functions ---


class FakeArgs:
    api_key = "K"
    language = None
    format = "jsonl"
    output_dir = None
    kind = "case"
    database_id = None
    item_id = None
    result_count = 10000
    published = None
    modified = None
    changed = None
    decision_date = None
    cite_type = "citedCases"

    def __init__(self, **kwargs):
        for key, value in kwargs.items():
            setattr(self, key, value)


def _lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_databases_jsonl(fake_get):
    fake_get(
        FakeResponse(
            200,
            {
                "caseDatabases": [
                    {"databaseId": "sklgb", "jurisdiction": "sk", "name": "SK LRB"},
                    {"databaseId": "onltb", "jurisdiction": "on", "name": "LTB"},
                ]
            },
        )
    )
    out = io.StringIO()
    assert run_command(cmd_databases, FakeArgs(), stream=out) == 0
    records = _lines(out)
    assert [r["databaseId"] for r in records] == ["sklgb", "onltb"]
    assert all("api_key" not in r and "apiKey" not in r for r in records)


def test_legislation_databases_table(fake_get):
    calls = fake_get(
        FakeResponse(
            200,
            {
                "legislationDatabases": [
                    {"databaseId": "ons", "type": "STATUTE", "jurisdiction": "on", "name": "Statutes"}
                ]
            },
        )
    )
    out = io.StringIO()
    args = FakeArgs(kind="legislation", format="table")
    assert run_command(cmd_databases, args, stream=out) == 0
    assert calls[0].startswith("https://api.canlii.org/v1/legislationBrowse/en/")
    assert "STATUTE" in out.getvalue()


def test_cases_with_decision_date(fake_get):
    calls = fake_get(FakeResponse(200, {"cases": []}))
    args = FakeArgs(
        database_id="sklgb",
        result_count=5,
        decision_date=["2020-01-01", "2020-06-30"],
        format="json",
    )
    out = io.StringIO()
    assert run_command(cmd_cases, args, stream=out) == 0
    assert "decisionDateAfter=2020-01-01" in calls[0]
    assert "resultCount=5" in calls[0]
    assert json.loads(out.getvalue()) == []


def test_cases_invalid_date(fake_get):
    calls = fake_get()
    args = FakeArgs(database_id="sklgb", changed=["2020-02-30", "2020-03-01"])
    assert run_command(cmd_cases, args, stream=io.StringIO()) == EXIT_VALIDATION
    assert calls == []


def test_cases_result_count_out_of_range(fake_get):
    calls = fake_get()
    args = FakeArgs(database_id="sklgb", result_count=10001)
    assert run_command(cmd_cases, args, stream=io.StringIO()) == EXIT_VALIDATION
    assert calls == []


def test_legislation_csv(fake_get):
    fake_get(
        FakeResponse(
            200,
            {
                "legislations": [
                    {
                        "databaseId": "ons",
                        "legislationId": "rso-1990-c-h8",
                        "title": "Highway Traffic Act",
                        "citation": "RSO 1990, c H.8",
                        "type": "STATUTE",
                    }
                ]
            },
        )
    )
    out = io.StringIO()
    args = FakeArgs(database_id="ons", format="csv")
    assert run_command(cmd_legislation, args, stream=out) == 0
    lines = out.getvalue().splitlines()
    assert lines[0] == "databaseId,legislationId,title,citation,type"
    assert lines[1].startswith("ons,rso-1990-c-h8,Highway Traffic Act")


def test_metadata_positional(fake_get):
    calls = fake_get(FakeResponse(200, {"caseId": "2008scc9", "keywords": "x"}))
    out = io.StringIO()
    args = FakeArgs(database_id="csc-scc", item_id="2008scc9")
    assert run_command(cmd_metadata, args, stream=out) == 0
    assert calls == ["https://api.canlii.org/v1/caseBrowse/en/csc-scc/2008scc9/?api_key=K"]
    assert _lines(out) == [{"caseId": "2008scc9", "keywords": "x"}]


def test_metadata_requires_both_ids(fake_get):
    fake_get()
    args = FakeArgs(database_id="csc-scc")
    assert run_command(cmd_metadata, args, stream=io.StringIO()) == EXIT_VALIDATION


def test_metadata_from_stdin(fake_get, monkeypatch):
    piped = "\n".join(
        json.dumps(r)
        for r in (
            {"databaseId": "sklgb", "caseId": "2019canlii1", "title": "A"},
            {"databaseId": "sklgb", "caseId": "2019canlii2", "title": "B"},
        )
    )
    monkeypatch.setattr(sys, "stdin", io.StringIO(piped + "\n"))
    calls = fake_get(
        FakeResponse(200, {"caseId": "2019canlii1"}),
        FakeResponse(200, {"caseId": "2019canlii2"}),
    )
    out = io.StringIO()
    assert run_command(cmd_metadata, FakeArgs(), stream=out) == 0
    assert [c.split("?")[0] for c in calls] == [
        "https://api.canlii.org/v1/caseBrowse/en/sklgb/2019canlii1/",
        "https://api.canlii.org/v1/caseBrowse/en/sklgb/2019canlii2/",
    ]
    assert [r["caseId"] for r in _lines(out)] == ["2019canlii1", "2019canlii2"]


def test_metadata_from_stdin_json_array(fake_get, monkeypatch):
    monkeypatch.setattr(
        sys,
        "stdin",
        io.StringIO(json.dumps([{"databaseId": "ons", "legislationId": "rso-1990-c-h8"}])),
    )
    calls = fake_get(FakeResponse(200, {"legislationId": "rso-1990-c-h8"}))
    args = FakeArgs(kind="legislation")
    assert run_command(cmd_metadata, args, stream=io.StringIO()) == 0
    assert "/legislationBrowse/en/ons/rso-1990-c-h8/" in calls[0]


def test_metadata_stdin_record_missing_id(fake_get, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO('{"databaseId": "sklgb"}\n'))
    calls = fake_get()
    assert run_command(cmd_metadata, FakeArgs(), stream=io.StringIO()) == EXIT_VALIDATION
    assert calls == []


def test_quota_aborts_remaining_stdin_records(fake_get, monkeypatch):
    piped = "\n".join(
        json.dumps({"databaseId": "sklgb", "caseId": f"2019canlii{i}"}) for i in range(3)
    )
    monkeypatch.setattr(sys, "stdin", io.StringIO(piped))
    calls = fake_get(
        FakeResponse(200, {"caseId": "2019canlii0"}),
        FakeResponse(429, None),
        FakeResponse(200, {"caseId": "2019canlii2"}),
    )
    out = io.StringIO()
    assert run_command(cmd_metadata, FakeArgs(), stream=out) == EXIT_QUOTA
    assert len(calls) == 2
    assert [r["caseId"] for r in _lines(out)] == ["2019canlii0"]


def test_citator_positional(fake_get):
    calls = fake_get(FakeResponse(200, {"citedLegislations": [{"legislationId": "x"}]}))
    out = io.StringIO()
    args = FakeArgs(cite_type="citedLegislations", database_id="csc-scc", item_id="2008scc9")
    assert run_command(cmd_citator, args, stream=out) == 0
    assert calls[0].split("?")[0] == (
        "https://api.canlii.org/v1/caseCitator/en/csc-scc/2008scc9/citedLegislations"
    )
    assert _lines(out) == [{"legislationId": "x"}]


def test_provider_error_exit_code(fake_get):
    fake_get(FakeResponse(403, {"error": "InvalidKey", "message": "bad key"}))
    assert run_command(cmd_databases, FakeArgs(), stream=io.StringIO()) == EXIT_ERROR


def test_missing_api_key(monkeypatch):
    monkeypatch.setenv("CANLII_API_KEY", "")

    import importlib

    import canlii_client.settings

    importlib.reload(canlii_client.settings)

    args = FakeArgs(api_key="")
    assert run_command(cmd_databases, args, stream=io.StringIO()) == EXIT_VALIDATION


def test_output_dir_writes_files(fake_get, tmp_path):
    fake_get(
        FakeResponse(
            200,
            {
                "cases": [
                    {"databaseId": "sklgb", "caseId": {"en": "2019canlii1"}, "title": "A", "citation": "c"}
                ]
            },
        )
    )
    args = FakeArgs(database_id="sklgb", output_dir=str(tmp_path))
    out = io.StringIO()
    assert run_command(cmd_cases, args, stream=out) == 0
    path = tmp_path / "cases" / "sklgb" / "2019canlii1.json"
    assert json.loads(path.read_text(encoding="utf-8"))["caseId"] == "2019canlii1"
    assert out.getvalue() == ""


@pytest.mark.parametrize("fmt", ["table", "json"])
@pytest.mark.parametrize(
    "response, exit_code",
    [(FakeResponse(500, None), EXIT_ERROR), (FakeResponse(429, None), EXIT_QUOTA)],
)
def test_failed_call_prints_nothing(fake_get, fmt, response, exit_code):
    fake_get(response)
    out = io.StringIO()
    args = FakeArgs(format=fmt)
    assert run_command(cmd_databases, args, stream=out) == exit_code
    assert out.getvalue() == ""


def test_rows_from_earlier_records_rendered_on_error(fake_get, monkeypatch):
    piped = "\n".join(
        json.dumps({"databaseId": "sklgb", "caseId": f"2019canlii{i}"}) for i in range(2)
    )
    monkeypatch.setattr(sys, "stdin", io.StringIO(piped))
    fake_get(
        FakeResponse(200, {"caseId": "2019canlii0"}),
        FakeResponse(429, None),
    )
    out = io.StringIO()
    assert run_command(cmd_metadata, FakeArgs(format="json"), stream=out) == EXIT_QUOTA
    assert json.loads(out.getvalue()) == [{"caseId": "2019canlii0"}]


def test_malformed_response_exit_code(fake_get):
    fake_get(FakeResponse(200, {"cases": [{"databaseId": "sklgb", "caseId": 7}]}))
    out = io.StringIO()
    args = FakeArgs(database_id="sklgb", format="json")
    assert run_command(cmd_cases, args, stream=out) == EXIT_ERROR
    assert out.getvalue() == ""

"""Shared pytest configuration and fixtures."""

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--run-real",
        action="store_true",
        default=False,
        help="Run tests that make real network requests",
    )


def pytest_collection_modifyitems(config, items):
    if not config.getoption("--run-real"):
        skip_real = pytest.mark.skip(reason="needs --run-real option to run")
        for item in items:
            if "real" in item.keywords:
                item.add_marker(skip_real)


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, body=None, text=None, reason=""):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else ""
        self.reason = reason

    def json(self):
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


@pytest.fixture
def fake_get(monkeypatch):
    """Patch requests.Session.get with queued responses; records requested URLs."""
    import requests

    calls = []
    responses = []

    def _get(self, url, **kwargs):
        calls.append(url)
        return responses.pop(0)

    monkeypatch.setattr(requests.Session, "get", _get)

    def queue(*resps):
        responses.extend(resps)
        return calls

    return queue

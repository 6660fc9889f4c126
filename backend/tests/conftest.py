"""Shared fixtures for client import tests."""

import pytest
import requests

from clientimport.dispatch import UploadDispatcher

UPSTREAM = "http://upstream.test/api"


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeSession:
    """Records posts and replies with a canned response or error."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse(200, {"imported": 1})
        self.error = error
        self.calls = []
        self.closed = False

    def close(self):
        self.closed = True

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def dispatcher(fake_session):
    return UploadDispatcher(UPSTREAM, token="secret-token", session=fake_session)


@pytest.fixture
def connection_error():
    return requests.exceptions.ConnectionError("connection refused")

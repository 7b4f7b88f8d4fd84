import pytest

from batchsubmit.config import Settings


class FakeClient:
    """
    Stand-in for HttpClient.

    `responses` is consumed one entry per post_form() call; each entry is a
    (status, content_type, body) tuple. Every call is recorded along with
    whether its attachment handle was still open during the request.
    """

    def __init__(self, responses=None, default=(200, "application/json", '{"ok": true}')):
        self.responses = list(responses or [])
        self.default = default
        self.calls = []
        self.closed = False

    def post_form(self, fields, files=None):
        handles = {}
        for name, (filename, fh, content_type) in (files or {}).items():
            handles[name] = {
                "filename": filename,
                "content_type": content_type,
                "closed_during_request": fh.closed,
                "data": fh.read(),
                "handle": fh,
            }
        self.calls.append({"fields": dict(fields), "files": handles})
        if self.responses:
            return self.responses.pop(0)
        return self.default

    def close(self):
        self.closed = True


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def settings():
    return Settings(
        endpoint_url="https://forms.example.com/api/submissions",
        token="secret-token",
        fields=["id", "name", "email"],
    )


@pytest.fixture
def make_client():
    return FakeClient

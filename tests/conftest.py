from __future__ import annotations

import pytest


@pytest.fixture
def fake_post(monkeypatch):
    """Replace requests.post; queue responses (or exceptions) and record calls."""

    class _FakePost:
        def __init__(self) -> None:
            self.responses: list = []
            self.calls: list[dict] = []

        def __call__(self, url, **kwargs):
            self.calls.append({"url": url, **kwargs})
            result = self.responses.pop(0)
            if isinstance(result, Exception):
                raise result
            return result

    post = _FakePost()
    monkeypatch.setattr("generate_languages.requests.post", post)
    monkeypatch.setattr("generate_languages.time.sleep", lambda seconds: None)
    return post

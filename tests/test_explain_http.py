from __future__ import annotations

import pytest

from providers.errors import ProviderError
from tests.utils import FakeOpenAIProvider


DELTAS = ["## 猫", "（ねこ）", "", "\n**Meaning:** cat", " 🐈 done."]


def test_missing_prompt_is_400(client, auth, registry):
    resp = client.get("/explain/open", headers=auth)
    assert resp.status_code == 400
    assert registry.provider_calls() == 0


def test_invalid_type_is_400(client, auth, registry):
    resp = client.get("/explain/open", params={"prompt": "猫", "type": "kanji"}, headers=auth)
    assert resp.status_code == 400
    assert resp.json()["code"] == "INVALID_PARAMETER"
    assert registry.provider_calls() == 0


def test_stream_reproduces_upstream_text(client, auth, registry):
    registry._openai = FakeOpenAIProvider(deltas=DELTAS)
    resp = client.get("/explain/open", params={"prompt": "猫"}, headers=auth)
    assert resp.status_code == 200
    assert resp.text == "".join(DELTAS)
    assert resp.headers["content-type"].startswith("text/plain")
    assert "utf-8" in resp.headers["content-type"]
    assert resp.headers["cache-control"] == "no-cache"


@pytest.mark.parametrize(
    "kind,prompt,marker,present",
    [
        ("vocabulary", "猫", "Kanji Breakdown", True),
        ("vocabulary", "cat", "Kanji Breakdown", False),
        ("grammar", "ても", "Japanese Grammar Expert", True),
    ],
)
def test_template_follows_type_and_prompt(client, auth, registry, kind, prompt, marker, present):
    registry._openai = FakeOpenAIProvider(deltas=["ok"])
    client.get("/explain/open", params={"prompt": prompt, "type": kind}, headers=auth)
    system, user = registry._openai.calls[0]["messages"]
    assert (marker in system["content"]) is present
    assert user["content"] == prompt


def test_default_type_is_vocabulary(client, auth, registry):
    registry._openai = FakeOpenAIProvider(deltas=["ok"])
    client.get("/explain/open", params={"prompt": "猫"}, headers=auth)
    system = registry._openai.calls[0]["messages"][0]["content"]
    assert "Japanese Language Expert" in system


def test_failure_before_stream_is_500(client, auth, registry):
    registry._openai = FakeOpenAIProvider(error=ProviderError(401, "AUTH_FAILED", "bad key"))
    resp = client.get("/explain/open", params={"prompt": "猫"}, headers=auth)
    assert resp.status_code == 500
    assert resp.json()["code"] == "UPSTREAM_ERROR"


def test_failure_mid_stream_truncates(client, auth, registry):
    registry._openai = FakeOpenAIProvider(deltas=["猫は", ProviderError(502, "UPSTREAM_ERROR", "reset"), "never"])
    resp = client.get("/explain/open", params={"prompt": "猫"}, headers=auth)
    assert resp.status_code == 200
    assert resp.text == "猫は"

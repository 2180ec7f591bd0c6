"""HTTP API tests."""

from __future__ import annotations

from forumlite.core.config import settings


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["renderer"] == "ready"


def test_root(client):
    body = client.get("/").json()
    assert body["name"] == settings.app_name
    assert body["api"] == settings.api_v1_prefix
    assert body["endpoints"]["paste"] == f"{settings.api_v1_prefix}/composer/paste"


# ==================== Paste ====================


def test_paste_splices_markdown(client, api_prefix):
    response = client.post(
        f"{api_prefix}/paste",
        json={
            "html": "<b>hi</b>",
            "text": "hi",
            "content": "say ",
            "selection_start": 4,
            "selection_end": 4,
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["markdown"] == "**hi**"
    assert body["used_fallback"] is False
    assert body["content"] == "say **hi**"
    assert body["selection_start"] == body["selection_end"] == 10


def test_paste_plain_text_only(client, api_prefix):
    body = client.post(f"{api_prefix}/paste", json={"text": "plain"}).json()
    assert body["markdown"] == "plain"
    assert body["used_fallback"] is True
    assert body["content"] == "plain"


def test_paste_rejects_negative_selection(client, api_prefix):
    response = client.post(f"{api_prefix}/paste", json={"html": "x", "selection_start": -1})
    assert response.status_code == 422


def test_paste_too_large(client, api_prefix, monkeypatch):
    monkeypatch.setattr(settings, "composer_max_paste_bytes", 10)
    response = client.post(f"{api_prefix}/paste", json={"html": "<p>" + "x" * 20 + "</p>"})
    assert response.status_code == 413


# ==================== Format ====================


def test_format_preset(client, api_prefix):
    response = client.post(
        f"{api_prefix}/format",
        json={"action": "bold", "content": "hello", "selection_start": 0, "selection_end": 5},
    )
    assert response.status_code == 200
    assert response.json() == {"content": "**hello**", "selection_start": 2, "selection_end": 7}


def test_format_list_with_marker(client, api_prefix):
    response = client.post(
        f"{api_prefix}/format",
        json={"action": "list", "value": "*", "content": "a\nb", "selection_start": 0, "selection_end": 3},
    )
    assert response.json()["content"] == "* a\n* b"


def test_format_numbered_list(client, api_prefix):
    response = client.post(
        f"{api_prefix}/format",
        json={"action": "numbered_list", "content": "a", "selection_start": 0, "selection_end": 1},
    )
    assert response.json()["content"] == "1. a"


def test_format_link(client, api_prefix):
    response = client.post(
        f"{api_prefix}/format",
        json={"action": "link", "value": "https://e.com", "content": "go", "selection_start": 0, "selection_end": 2},
    )
    assert response.json()["content"] == "[go](https://e.com)"


def test_format_table(client, api_prefix):
    response = client.post(f"{api_prefix}/format", json={"action": "table"})
    assert "| Header 1 | Header 2 |" in response.json()["content"]


def test_format_missing_value(client, api_prefix):
    response = client.post(f"{api_prefix}/format", json={"action": "link"})
    assert response.status_code == 400


def test_format_invalid_value(client, api_prefix):
    response = client.post(f"{api_prefix}/format", json={"action": "align", "value": "sideways"})
    assert response.status_code == 400


def test_format_unknown_action(client, api_prefix):
    response = client.post(f"{api_prefix}/format", json={"action": "blink"})
    assert response.status_code == 400


def test_format_actions(client, api_prefix):
    body = client.get(f"{api_prefix}/format/actions").json()
    assert "bold" in body["presets"]
    assert "spoiler" in body["presets"]
    assert "table" in body["actions"]
    assert body["alignments"] == ["left", "center", "right", "justify"]


# ==================== Preview ====================


def test_preview(client, api_prefix):
    response = client.post(f"{api_prefix}/preview", json={"content": "**hi** @alice"})
    assert response.status_code == 200
    body = response.json()
    assert "<strong>hi</strong>" in body["html"]
    assert 'class="mention"' in body["html"]
    assert body["mentions"] == ["alice"]


def test_mentions(client, api_prefix):
    body = client.post(f"{api_prefix}/mentions", json={"content": "@a @b @a"}).json()
    assert body == {"mentions": ["a", "b"]}


def test_mentions_too_large(client, api_prefix, monkeypatch):
    monkeypatch.setattr(settings, "composer_max_paste_bytes", 10)
    response = client.post(f"{api_prefix}/mentions", json={"content": "@" + "a" * 20})
    assert response.status_code == 413

import base64

from eventcheckin.services.qr_service import encode_payload, render_scannable, render_scannable_data_url

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

PAYLOAD = {
    "type": "attendance_verification",
    "event_id": 7,
    "event_title": "Science Fair",
    "token_id": "k3y",
    "issued_at": "2026-10-19T10:00:00+00:00",
}


def test_render_returns_png():
    assert render_scannable(PAYLOAD).startswith(PNG_SIGNATURE)


def test_render_is_deterministic():
    assert render_scannable(PAYLOAD) == render_scannable(dict(reversed(list(PAYLOAD.items()))))


def test_data_url_embeds_png():
    url = render_scannable_data_url(PAYLOAD)

    assert url.startswith("data:image/png;base64,")
    assert base64.b64decode(url.split(",", 1)[1]).startswith(PNG_SIGNATURE)


def test_encode_payload_is_compact_json():
    assert encode_payload({"b": 1, "a": "x"}) == '{"a":"x","b":1}'
    assert encode_payload("already text") == "already text"

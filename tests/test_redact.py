from __future__ import annotations

from pyfleet._redact import REDACTED, redact_for_log, redact_url


def test_redact_for_log_masks_token_params() -> None:
    params = {"geometries": "polyline6", "access_token": "sk.secret", "overview": "full"}

    redacted = redact_for_log(params)
    assert redacted == {"geometries": "polyline6", "access_token": REDACTED, "overview": "full"}
    assert params["access_token"] == "sk.secret"


def test_redact_url_masks_query_token() -> None:
    url = "https://api.mapbox.com/directions/v5/mapbox/driving/1,2;3,4?access_token=sk.secret&overview=full"

    assert redact_url(url) == (
        "https://api.mapbox.com/directions/v5/mapbox/driving/1,2;3,4?access_token=<redacted>&overview=full"
    )
    assert "sk.secret" not in redact_for_log({"message": f"failed: {url}"})["message"]


def test_redact_for_log_clips_long_geometry() -> None:
    body = {"code": "Ok", "routes": [{"geometry": "g" * 600, "distance": 1200.5}]}

    redacted = redact_for_log(body, max_string=10)
    route = redacted["routes"][0]
    assert route["geometry"] == "g" * 10 + "...<590 more chars>"
    assert route["distance"] == 1200.5


def test_redact_for_log_collapses_deep_nesting() -> None:
    nested: dict = {"leaf": 1}
    for _ in range(8):
        nested = {"child": nested}

    redacted = redact_for_log(nested)
    for _ in range(6):
        redacted = redacted["child"]
    assert redacted == "<1 keys>"

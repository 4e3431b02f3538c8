from __future__ import annotations

from procivlog._redact import redact_for_log, redact_url


def test_redact_for_log_redacts_personal_fields() -> None:
    payload = {
        "id": "T1",
        "driverName": "Mario Rossi",
        "notes": "chiamare il 333...",
        "maintenanceDesc": "",
        "startKm": 120,
        "nested": [{"sinkUrl": "https://x"}],
    }

    redacted = redact_for_log(payload)

    assert redacted["id"] == "T1"
    assert redacted["driverName"] == "<redacted>"
    assert redacted["notes"] == "<redacted>"
    assert redacted["maintenanceDesc"] == ""
    assert redacted["startKm"] == 120
    assert redacted["nested"][0]["sinkUrl"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    redacted = redact_for_log({"destination": "x" * 600}, max_string=10)
    assert redacted["destination"].startswith("x" * 10)
    assert "<truncated>" in redacted["destination"]


def test_redact_url_hides_deployment_path() -> None:
    assert redact_url("https://script.google.com/macros/s/SECRET/exec?x=1") == "https://script.google.com/…"
    assert redact_url("https://example.org") == "https://example.org"
    assert redact_url("garbage") == "<invalid-url>"
    assert redact_url("http://[::1") == "<invalid-url>"
    assert redact_url("") == ""

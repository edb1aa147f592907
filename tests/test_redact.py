from __future__ import annotations

from pyhotaru._redact import redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "email": "ada@example.com",
        "password": "pw",
        "masterKey": "mk",
        "installationId": "inst-1",
        "nested": {"sessionId": "sess-1"},
    }

    redacted = redact_for_log(payload)
    assert redacted["email"] == "ada@example.com"
    assert redacted["password"] == "<redacted>"
    assert redacted["masterKey"] == "<redacted>"
    assert redacted["installationId"] == "inst-1"
    assert redacted["nested"]["sessionId"] == "<redacted>"


def test_redact_for_log_keeps_absent_secrets_visible() -> None:
    assert redact_for_log({"masterKey": None}) == {"masterKey": None}


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_summarizes_pending_changelog() -> None:
    redacted = redact_for_log({"sessionId": "sess-1", "clientChangelog": [{"field": "a"}, {"field": "b"}]})
    assert redacted == {"sessionId": "<redacted>", "clientChangelog": "<2 changes>"}

from __future__ import annotations

from registrar import Model
from registrar._redact import is_sensitive_key, redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "name": "tim",
        "password": "pw",
        "session": {"userId": "123", "refresh_token": "SIG", "api-key": "K"},
    }

    redacted = redact_for_log(payload)
    assert redacted["name"] == "tim"
    assert redacted["password"] == "<redacted>"
    assert redacted["session"]["userId"] == "123"
    assert redacted["session"]["refresh_token"] == "<redacted>"
    assert redacted["session"]["api-key"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    redacted = redact_for_log({"value": "x" * 600}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_models_are_logged_through_their_attributes() -> None:
    model = Model({"user": "tim", "user_password": "pw"})
    assert redact_for_log([model]) == [{"user": "tim", "user_password": "<redacted>"}]


def test_is_sensitive_key() -> None:
    assert is_sensitive_key("Authorization")
    assert is_sensitive_key("client_secret")
    assert not is_sensitive_key("title")

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

from registrar import Model, RegistrarConfig, RegistrarConfigError, get_config, set_config


@pytest.fixture
def restore_config() -> Iterator[None]:
    previous = get_config()
    yield
    set_config(previous)


def test_defaults() -> None:
    config = RegistrarConfig()
    assert config.id_attribute == "id"
    assert config.cid_prefix == "c"
    assert config.trace_events is False


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REGISTRAR_ID_ATTRIBUTE", "_id")
    monkeypatch.setenv("REGISTRAR_CID_PREFIX", "m")
    monkeypatch.setenv("REGISTRAR_TRACE_EVENTS", "yes")
    monkeypatch.setenv("REGISTRAR_LOG_MAX_STRING", "64")

    config = RegistrarConfig.from_env(cid_prefix="override")

    assert config.id_attribute == "_id"
    assert config.cid_prefix == "override"
    assert config.trace_events is True
    assert config.log_max_string == 64


def test_from_env_rejects_bad_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REGISTRAR_LOG_MAX_STRING", "lots")
    with pytest.raises(RegistrarConfigError):
        RegistrarConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [{"id_attribute": ""}, {"cid_prefix": ""}, {"log_max_string": 0}],
)
def test_invalid_values(kwargs: dict) -> None:
    with pytest.raises(RegistrarConfigError):
        RegistrarConfig(**kwargs)


def test_models_follow_process_config(restore_config: None) -> None:
    set_config(RegistrarConfig(id_attribute="_id", cid_prefix="doc"))
    model = Model({"_id": 0, "id": None})
    assert model.cid.startswith("doc")
    assert model.id == 0
    assert not model.is_new()


def test_trace_events_logs_dispatch(restore_config: None, caplog: pytest.LogCaptureFixture) -> None:
    set_config(RegistrarConfig(trace_events=True))
    model = Model()
    with caplog.at_level(logging.DEBUG, logger="registrar.events"):
        model.set({"name": "x", "secret": "hunter2"}, silent=True)
        model.trigger("change:name", model)
    assert "change:name" in caplog.text
    assert "hunter2" not in caplog.text


def test_validation_rejection_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    model = Model()
    model.validate = lambda attrs, options: "nope"
    with caplog.at_level(logging.DEBUG, logger="registrar.model"):
        model.set("token", "abc123")
    assert "Validation rejected" in caplog.text
    assert "abc123" not in caplog.text

"""Tests for configuration and log emitters

Tests use # TEST###: comments for the test catalog.
"""

import io

import pytest
from capserve.config import (
    ServerConfig,
    ConfigError,
    DEFAULT_NOMINATIM_URL,
    DEFAULT_OPEN_METEO_URL,
    DEFAULT_HTTP_TIMEOUT,
)
from capserve.log import StderrLogEmitter, NullLogEmitter, RecordingLogEmitter
from capserve.version import __version__


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "HF_TOKEN",
        "CAPSERVE_NOMINATIM_URL",
        "CAPSERVE_OPEN_METEO_URL",
        "CAPSERVE_HF_INFERENCE_URL",
        "CAPSERVE_HTTP_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# TEST077: Test defaults apply when nothing is configured
def test_config_defaults(clean_env):
    config = ServerConfig()

    assert config.hf_token is None
    assert config.nominatim_url == DEFAULT_NOMINATIM_URL
    assert config.open_meteo_url == DEFAULT_OPEN_METEO_URL
    assert config.http_timeout == DEFAULT_HTTP_TIMEOUT
    assert config.user_agent == f"capserve/{__version__}"


# TEST078: Test environment variables override defaults
def test_config_from_environment(clean_env):
    clean_env.setenv("HF_TOKEN", "hf_secret")
    clean_env.setenv("CAPSERVE_NOMINATIM_URL", "http://geo.local/search")
    clean_env.setenv("CAPSERVE_HF_INFERENCE_URL", "http://hf.local/models/")
    clean_env.setenv("CAPSERVE_HTTP_TIMEOUT", "2.5")

    config = ServerConfig()
    assert config.hf_token == "hf_secret"
    assert config.nominatim_url == "http://geo.local/search"
    assert config.hf_inference_url == "http://hf.local/models"
    assert config.http_timeout == 2.5


# TEST079: Test constructor arguments and builder methods override the environment
def test_config_explicit_overrides(clean_env):
    clean_env.setenv("HF_TOKEN", "from-env")

    config = ServerConfig(hf_token="explicit").with_open_meteo_url("http://wx.local")
    assert config.hf_token == "explicit"
    assert config.open_meteo_url == "http://wx.local"
    assert config.with_hf_token("builder").hf_token == "builder"


# TEST080: Test invalid timeouts are rejected
def test_config_invalid_timeout(clean_env):
    clean_env.setenv("CAPSERVE_HTTP_TIMEOUT", "soon")
    with pytest.raises(ConfigError):
        ServerConfig()

    with pytest.raises(ConfigError):
        ServerConfig(http_timeout=0)


# TEST081: Test config repr never exposes the token
def test_config_repr_hides_token(clean_env):
    assert "hf_secret" not in repr(ServerConfig(hf_token="hf_secret"))


# TEST082: Test stderr emitter prefixes the level and filters below the minimum
def test_stderr_emitter():
    stream = io.StringIO()
    emitter = StderrLogEmitter(min_level="info", stream=stream)

    emitter.emit_log("debug", "hidden")
    emitter.emit_log("error", "visible")

    assert stream.getvalue() == "[ERROR] visible\n"
    with pytest.raises(ValueError):
        StderrLogEmitter(min_level="loud")


# TEST083: Test null and recording emitters
def test_null_and_recording_emitters():
    NullLogEmitter().emit_log("error", "dropped")

    recorder = RecordingLogEmitter()
    recorder.emit_log("info", "one")
    recorder.emit_log("warn", "two")
    assert recorder.entries == [("info", "one"), ("warn", "two")]
    assert recorder.messages("warn") == ["two"]

"""Configuration for the standard capability set

Supports configuration via:
1. Constructor arguments and builder methods (highest priority)
2. Environment variables
3. Default values
"""

import os
from typing import Optional

from capserve.version import __version__


DEFAULT_SERVER_NAME = "capserve"
DEFAULT_NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
DEFAULT_HF_INFERENCE_URL = "https://router.huggingface.co/hf-inference/models"
DEFAULT_HTTP_TIMEOUT = 10.0


class ConfigError(Exception):
    """Invalid configuration value"""
    pass


class ServerConfig:
    """Settings for the standard capabilities and their providers

    Environment variables:
    - `HF_TOKEN`: Hugging Face API token (image generation)
    - `CAPSERVE_NOMINATIM_URL`: Geocoding search endpoint
    - `CAPSERVE_OPEN_METEO_URL`: Weather forecast endpoint
    - `CAPSERVE_HF_INFERENCE_URL`: Base URL for Hugging Face model inference
    - `CAPSERVE_HTTP_TIMEOUT`: Provider request timeout in seconds
    """

    def __init__(
        self,
        hf_token: Optional[str] = None,
        nominatim_url: Optional[str] = None,
        open_meteo_url: Optional[str] = None,
        hf_inference_url: Optional[str] = None,
        http_timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        server_name: str = DEFAULT_SERVER_NAME,
        server_version: str = __version__,
    ):
        if hf_token is None:
            hf_token = os.getenv("HF_TOKEN") or None

        if nominatim_url is None:
            nominatim_url = os.getenv("CAPSERVE_NOMINATIM_URL", DEFAULT_NOMINATIM_URL)

        if open_meteo_url is None:
            open_meteo_url = os.getenv("CAPSERVE_OPEN_METEO_URL", DEFAULT_OPEN_METEO_URL)

        if hf_inference_url is None:
            hf_inference_url = os.getenv("CAPSERVE_HF_INFERENCE_URL", DEFAULT_HF_INFERENCE_URL)

        if http_timeout is None:
            raw_timeout = os.getenv("CAPSERVE_HTTP_TIMEOUT")
            if raw_timeout is None:
                http_timeout = DEFAULT_HTTP_TIMEOUT
            else:
                try:
                    http_timeout = float(raw_timeout)
                except ValueError:
                    raise ConfigError(f"CAPSERVE_HTTP_TIMEOUT must be a number, got '{raw_timeout}'")

        if http_timeout <= 0:
            raise ConfigError(f"HTTP timeout must be positive, got {http_timeout}")

        self.hf_token = hf_token
        self.nominatim_url = nominatim_url
        self.open_meteo_url = open_meteo_url
        self.hf_inference_url = hf_inference_url.rstrip("/")
        self.http_timeout = http_timeout
        self.user_agent = user_agent or f"{server_name}/{server_version}"
        self.server_name = server_name
        self.server_version = server_version

    def with_hf_token(self, token: str) -> "ServerConfig":
        """Set the Hugging Face token"""
        self.hf_token = token
        return self

    def with_nominatim_url(self, url: str) -> "ServerConfig":
        """Set a custom geocoding endpoint"""
        self.nominatim_url = url
        return self

    def with_open_meteo_url(self, url: str) -> "ServerConfig":
        """Set a custom weather endpoint"""
        self.open_meteo_url = url
        return self

    def with_hf_inference_url(self, url: str) -> "ServerConfig":
        """Set a custom inference base URL"""
        self.hf_inference_url = url.rstrip("/")
        return self

    def __repr__(self) -> str:
        token = "set" if self.hf_token else "unset"
        return (
            f"ServerConfig(name={self.server_name!r}, version={self.server_version!r}, "
            f"hf_token={token}, timeout={self.http_timeout})"
        )

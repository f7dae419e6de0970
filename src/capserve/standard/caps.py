"""Standard capability set

build_registry() assembles the operations, resource and template shipped
with capserve into a fresh CapRegistry. Provider-backed operations share an
optional injected httpx client; without one they open a short-lived client
per call.
"""

import json
from datetime import datetime
from typing import Callable, Optional

import httpx

from capserve.cap.definition import TEXT_OUTPUT_SCHEMA, OperationCap, ResourceCap, TemplateCap
from capserve.cap.registry import CapRegistry
from capserve.cap.response import ResourceContents, ResourceResult
from capserve.config import ServerConfig
from capserve.standard.basic import CALCULATOR_SCHEMA, GREET_SCHEMA, calculator, greet
from capserve.standard.code_review import CODE_REVIEW_SCHEMA, CODE_REVIEW_TEMPLATE
from capserve.standard.country_time import COUNTRY_TIME_SCHEMA, make_country_time, utc_now
from capserve.standard.geocode import GEOCODE_SCHEMA, make_geocode
from capserve.standard.image import IMAGE_SCHEMA, make_generate_image
from capserve.standard.weather import WEATHER_SCHEMA, make_weather


SERVER_INFO_NAME = "server-info"
SERVER_INFO_URI = "capserve://server-info"


def server_info_resource(registry: CapRegistry, config: ServerConfig) -> ResourceCap:
    """Resource serving the registry snapshot, rebuilt on every fetch"""
    async def server_info() -> ResourceResult:
        snapshot = registry.snapshot(config.server_name, config.server_version)
        text = json.dumps(snapshot, indent=2, ensure_ascii=False)
        return ResourceResult([ResourceContents(SERVER_INFO_URI, text, "application/json")])

    return ResourceCap(
        SERVER_INFO_NAME,
        SERVER_INFO_URI,
        "Server information and the list of available capabilities",
        server_info,
        "application/json",
    )


def build_registry(
    config: Optional[ServerConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
    clock: Callable[[], datetime] = utc_now,
) -> CapRegistry:
    """Create a registry populated with the standard capabilities

    Args:
        config: Provider settings; read from the environment when omitted
        client: Shared HTTP client for provider calls; owned by the caller
        clock: Source of the current time for get_country_time

    Returns:
        A new CapRegistry
    """
    config = config or ServerConfig()
    registry = CapRegistry()

    registry.register(OperationCap(
        "greet",
        "Returns a greeting for the given name and language.",
        GREET_SCHEMA,
        greet,
        TEXT_OUTPUT_SCHEMA,
    ))
    registry.register(OperationCap(
        "calculator",
        "Calculates the result of two numbers and an operator.",
        CALCULATOR_SCHEMA,
        calculator,
        TEXT_OUTPUT_SCHEMA,
    ))
    registry.register(OperationCap(
        "get_country_time",
        "Returns the current time in the given country.",
        COUNTRY_TIME_SCHEMA,
        make_country_time(clock),
        TEXT_OUTPUT_SCHEMA,
    ))
    registry.register(OperationCap(
        "geocode",
        "Returns latitude and longitude for a city name or address using the Nominatim OpenStreetMap API.",
        GEOCODE_SCHEMA,
        make_geocode(config, client),
        TEXT_OUTPUT_SCHEMA,
    ))
    registry.register(OperationCap(
        "get-weather",
        "Returns current weather and a daily forecast for a latitude/longitude and forecast length.",
        WEATHER_SCHEMA,
        make_weather(config, client),
        TEXT_OUTPUT_SCHEMA,
    ))
    registry.register(OperationCap(
        "generate_image",
        "Generates an image from a text prompt using the Hugging Face FLUX.1-schnell model.",
        IMAGE_SCHEMA,
        make_generate_image(config, client),
    ))

    registry.register(server_info_resource(registry, config))

    registry.register(TemplateCap(
        "code-review",
        "Prompt for reviewing a block of code provided by the user.",
        CODE_REVIEW_SCHEMA,
        CODE_REVIEW_TEMPLATE.as_handler(),
    ))

    return registry

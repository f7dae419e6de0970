"""Address to coordinates lookup via the Nominatim (OpenStreetMap) search API"""

from typing import Any, Dict, List, Optional

import httpx

from capserve.cap.definition import OperationHandler
from capserve.cap.response import ResponseEnvelope
from capserve.config import ServerConfig
from capserve.schema.descriptor import SchemaDescriptor, number_field, string_field
from capserve.standard.basic import format_number
from capserve.standard.errors import ProviderError
from capserve.standard.http import fetch_json, provider_client


PROVIDER = "Nominatim"

GEOCODE_SCHEMA = SchemaDescriptor.of(
    string_field("address", 'City name or address to search for (e.g. "Seoul", "New York")'),
    number_field(
        "limit", "Maximum number of results (default: 1, max: 10)",
        required=False, default=1, minimum=1, maximum=10, integer=True,
    ),
)


def format_place(index: int, place: Dict[str, Any], address: str) -> str:
    try:
        lat = format_number(float(place["lat"]))
        lon = format_number(float(place["lon"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ProviderError(PROVIDER, f"result {index} has no usable coordinates: {e}")

    display_name = place.get("display_name") or address
    return (
        f"Result {index}:\n"
        f"Address: {display_name}\n"
        f"Latitude: {lat}\n"
        f"Longitude: {lon}\n"
        f"Coordinates: {lat}, {lon}"
    )


def make_geocode(config: ServerConfig, client: Optional[httpx.AsyncClient] = None) -> OperationHandler:
    """Build the geocode handler

    An empty search result is error-as-data. An unreachable or failing
    provider raises ProviderError.
    """
    async def geocode(args: Dict[str, Any]) -> ResponseEnvelope:
        address = args["address"]
        params = {
            "q": address,
            "format": "json",
            "limit": str(args["limit"]),
            "addressdetails": "1",
        }

        async with provider_client(config, client) as http:
            data = await fetch_json(
                http, PROVIDER, config.nominatim_url, params,
                headers={"User-Agent": config.user_agent},
            )

        if not isinstance(data, list):
            raise ProviderError(PROVIDER, f"expected a list of places, got {type(data).__name__}")

        if not data:
            return ResponseEnvelope.error_text(f'No results found for "{address}"')

        places: List[str] = [format_place(i + 1, place, address) for i, place in enumerate(data)]
        results = "\n\n".join(places)
        return ResponseEnvelope.text(f'"{address}" search results:\n\n{results}')

    return geocode

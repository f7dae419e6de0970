"""Current conditions and daily forecast via the Open-Meteo API"""

from typing import Any, Dict, List, Optional

import httpx

from capserve.cap.definition import OperationHandler
from capserve.cap.response import ResponseEnvelope
from capserve.config import ServerConfig
from capserve.schema.descriptor import SchemaDescriptor, number_field, string_field
from capserve.standard.basic import format_number
from capserve.standard.errors import ProviderError
from capserve.standard.http import fetch_json, provider_client


PROVIDER = "Open-Meteo"

WEATHER_SCHEMA = SchemaDescriptor.of(
    number_field("latitude", "Latitude (-90 to 90)", minimum=-90, maximum=90),
    number_field("longitude", "Longitude (-180 to 180)", minimum=-180, maximum=180),
    number_field(
        "forecast_days", "Forecast length in days (default: 7, max: 16)",
        required=False, default=7, minimum=1, maximum=16, integer=True,
    ),
    string_field("timezone", "Time zone (default: auto, e.g. Asia/Seoul, UTC)", required=False, default="auto"),
)

CURRENT_FIELDS = "temperature_2m,relative_humidity_2m,weather_code,wind_speed_10m,wind_direction_10m"
DAILY_FIELDS = "temperature_2m_max,temperature_2m_min,weather_code,precipitation_sum,wind_speed_10m_max"

# WMO weather interpretation codes
WEATHER_CODES: Dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snowfall",
    73: "Moderate snowfall",
    75: "Heavy snowfall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

NOT_AVAILABLE = "N/A"


def describe_weather(code: Any) -> str:
    if code is None:
        return NOT_AVAILABLE
    return WEATHER_CODES.get(code, f"Code {code}")


def _with_unit(value: Any, unit: str, missing: str = NOT_AVAILABLE) -> str:
    if value is None:
        return missing
    return f"{format_number(value)}{unit}"


def _series_value(series: Dict[str, Any], key: str, index: int) -> Any:
    values = series.get(key)
    if not isinstance(values, list) or index >= len(values):
        return None
    return values[index]


def format_daily(daily: Dict[str, Any]) -> List[str]:
    dates = daily.get("time")
    if not isinstance(dates, list):
        return []

    forecasts = []
    for i, date in enumerate(dates):
        max_temp = _with_unit(_series_value(daily, "temperature_2m_max", i), "°C")
        min_temp = _with_unit(_series_value(daily, "temperature_2m_min", i), "°C")
        weather = describe_weather(_series_value(daily, "weather_code", i))
        precipitation = _with_unit(_series_value(daily, "precipitation_sum", i), " mm", missing="0 mm")
        wind = _with_unit(_series_value(daily, "wind_speed_10m_max", i), " km/h")
        forecasts.append(
            f"📅 {date}\n"
            f"   Weather: {weather}\n"
            f"   Temperature: {min_temp} ~ {max_temp}\n"
            f"   Precipitation: {precipitation}\n"
            f"   Max wind speed: {wind}"
        )
    return forecasts


def format_report(latitude: float, longitude: float, forecast_days: int, data: Dict[str, Any]) -> str:
    current = data["current"]
    daily_lines = format_daily(data["daily"])
    daily_text = "\n\n".join(daily_lines) if daily_lines else "Forecast data is unavailable."

    return (
        f"🌤️ Weather (latitude: {format_number(latitude)}, longitude: {format_number(longitude)})\n"
        f"\n"
        f"📍 Current conditions ({current.get('time') or NOT_AVAILABLE})\n"
        f"   Weather: {describe_weather(current.get('weather_code'))}\n"
        f"   Temperature: {_with_unit(current.get('temperature_2m'), '°C')}\n"
        f"   Humidity: {_with_unit(current.get('relative_humidity_2m'), '%')}\n"
        f"   Wind speed: {_with_unit(current.get('wind_speed_10m'), ' km/h')}\n"
        f"   Wind direction: {_with_unit(current.get('wind_direction_10m'), '°')}\n"
        f"\n"
        f"📊 {forecast_days}-day forecast\n"
        f"{daily_text}"
    )


def make_weather(config: ServerConfig, client: Optional[httpx.AsyncClient] = None) -> OperationHandler:
    """Build the weather handler

    A failing provider or a response without current and daily sections
    raises ProviderError.
    """
    async def weather(args: Dict[str, Any]) -> ResponseEnvelope:
        latitude = args["latitude"]
        longitude = args["longitude"]
        forecast_days = args["forecast_days"]

        params = {
            "latitude": format_number(latitude),
            "longitude": format_number(longitude),
            "current": CURRENT_FIELDS,
            "daily": DAILY_FIELDS,
            "forecast_days": str(forecast_days),
            "timezone": args["timezone"],
        }

        async with provider_client(config, client) as http:
            data = await fetch_json(http, PROVIDER, config.open_meteo_url, params)

        if not isinstance(data, dict) or not isinstance(data.get("current"), dict) or not isinstance(data.get("daily"), dict):
            raise ProviderError(PROVIDER, "response is missing current or daily data")

        return ResponseEnvelope.text(format_report(latitude, longitude, forecast_days, data))

    return weather

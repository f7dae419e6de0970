"""Current local time by country name"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
from zoneinfo import ZoneInfo

from capserve.cap.definition import OperationHandler
from capserve.cap.response import ResponseEnvelope
from capserve.schema.descriptor import SchemaDescriptor, string_field


COUNTRY_TIME_SCHEMA = SchemaDescriptor.of(
    string_field("country", "Country name (Korean or English)"),
)

# Country name (Korean or English) -> representative IANA time zone
COUNTRY_TIMEZONES: Dict[str, str] = {
    "한국": "Asia/Seoul",
    "대한민국": "Asia/Seoul",
    "South Korea": "Asia/Seoul",
    "Korea": "Asia/Seoul",
    "미국": "America/New_York",
    "United States": "America/New_York",
    "USA": "America/New_York",
    "US": "America/New_York",
    "일본": "Asia/Tokyo",
    "Japan": "Asia/Tokyo",
    "중국": "Asia/Shanghai",
    "China": "Asia/Shanghai",
    "영국": "Europe/London",
    "United Kingdom": "Europe/London",
    "UK": "Europe/London",
    "프랑스": "Europe/Paris",
    "France": "Europe/Paris",
    "독일": "Europe/Berlin",
    "Germany": "Europe/Berlin",
    "이탈리아": "Europe/Rome",
    "Italy": "Europe/Rome",
    "스페인": "Europe/Madrid",
    "Spain": "Europe/Madrid",
    "러시아": "Europe/Moscow",
    "Russia": "Europe/Moscow",
    "인도": "Asia/Kolkata",
    "India": "Asia/Kolkata",
    "호주": "Australia/Sydney",
    "Australia": "Australia/Sydney",
    "브라질": "America/Sao_Paulo",
    "Brazil": "America/Sao_Paulo",
    "캐나다": "America/Toronto",
    "Canada": "America/Toronto",
    "멕시코": "America/Mexico_City",
    "Mexico": "America/Mexico_City",
    "싱가포르": "Asia/Singapore",
    "Singapore": "Asia/Singapore",
    "태국": "Asia/Bangkok",
    "Thailand": "Asia/Bangkok",
    "베트남": "Asia/Ho_Chi_Minh",
    "Vietnam": "Asia/Ho_Chi_Minh",
    "인도네시아": "Asia/Jakarta",
    "Indonesia": "Asia/Jakarta",
    "필리핀": "Asia/Manila",
    "Philippines": "Asia/Manila",
    "아랍에미리트": "Asia/Dubai",
    "UAE": "Asia/Dubai",
    "United Arab Emirates": "Asia/Dubai",
    "사우디아라비아": "Asia/Riyadh",
    "Saudi Arabia": "Asia/Riyadh",
    "이집트": "Africa/Cairo",
    "Egypt": "Africa/Cairo",
    "남아프리카": "Africa/Johannesburg",
    "South Africa": "Africa/Johannesburg",
    "아르헨티나": "America/Argentina/Buenos_Aires",
    "Argentina": "America/Argentina/Buenos_Aires",
    "칠레": "America/Santiago",
    "Chile": "America/Santiago",
    "뉴질랜드": "Pacific/Auckland",
    "New Zealand": "Pacific/Auckland",
}

SUGGESTION_COUNT = 10

# English names, independent of the process locale
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def lookup_timezone(country: str) -> Optional[str]:
    """Resolve a country name to a time zone. Surrounding whitespace is ignored."""
    return COUNTRY_TIMEZONES.get(country.strip())


def format_local_time(moment: datetime) -> str:
    weekday = WEEKDAYS[moment.weekday()]
    month = MONTHS[moment.month - 1]
    return f"{weekday}, {month} {moment.day}, {moment.year} {moment:%H:%M:%S}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def make_country_time(clock: Callable[[], datetime] = utc_now) -> OperationHandler:
    """Build the country time handler

    Args:
        clock: Returns the current aware datetime
    """
    async def country_time(args: Dict[str, Any]) -> ResponseEnvelope:
        country = args["country"]
        zone_name = lookup_timezone(country)

        if zone_name is None:
            examples = ", ".join(list(COUNTRY_TIMEZONES)[:SUGGESTION_COUNT])
            return ResponseEnvelope.error_text(
                f'Error: country "{country}" was not found.\n\nSupported countries include: {examples}...'
            )

        local = clock().astimezone(ZoneInfo(zone_name))
        return ResponseEnvelope.text(f"Current time in {country}:\n{format_local_time(local)} ({zone_name})")

    return country_time

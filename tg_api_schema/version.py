"""
Version header of the documentation page ("Bot API 7.4" + release date anchor).
"""

import re

from bs4 import BeautifulSoup

from .exceptions import ScrapeError
from .logger import get_module_logger
from .schemas import DateObject, Version

logger = get_module_logger("version")

VERSION_SELECTOR = "#dev_page_content > p:nth-child(5) > strong"
RELEASE_DATE_SELECTOR = "#dev_page_content > h4 > a"
VERSION_PATTERN = re.compile(r"^\d+\.\d+$")

MONTHS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)


def parse_date_string(date_string: str) -> DateObject:
    """Parse a month-day-year anchor name such as "june-20-2024"."""
    parts = date_string.lower().split("-")
    if len(parts) != 3:
        raise ScrapeError(
            f"Invalid date format. Expected month-day-year but got {date_string}",
            details={"date": date_string}
        )

    month_name, day_text, year_text = parts
    if month_name not in MONTHS:
        raise ScrapeError(f"Invalid month name: {month_name}", details={"date": date_string})

    try:
        day = int(day_text)
        year = int(year_text)
    except ValueError:
        raise ScrapeError("Invalid numeric value in date", details={"date": date_string})

    return DateObject(year=year, month=MONTHS.index(month_name) + 1, day=day)


def parse_last_version(soup: BeautifulSoup) -> Version:
    """
    Read the latest Bot API version and its release date.

    Raises:
        ScrapeError: if the header is missing or not in "major.minor" form
    """
    strong = soup.select_one(VERSION_SELECTOR)
    words = strong.get_text().split(" ") if strong is not None else []
    version_text = words[2] if len(words) > 2 else ""

    if not VERSION_PATTERN.match(version_text):
        raise ScrapeError("Invalid version format", details={"version": version_text})

    major, minor = (int(n) for n in version_text.split("."))

    date_anchor = soup.select_one(RELEASE_DATE_SELECTOR)
    date_name = date_anchor.get("name") if date_anchor is not None else None
    if not date_name:
        raise ScrapeError("No release date found")

    version = Version(major=major, minor=minor, release_date=parse_date_string(date_name))
    logger.info(f"Bot API {major}.{minor}")
    return version

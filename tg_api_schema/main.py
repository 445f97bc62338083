"""
Main orchestrator for the Bot API schema parser.

Coordinates the pipeline: page HTML → version + navigation → sections →
assembler. Fetching is kept at the edges (build_from_url / build_from_file)
so `build` itself works on any HTML string and never touches the network.
"""

from pathlib import Path
from typing import Optional, Union

from .assembler import to_custom_schema
from .dom import load_document
from .fetcher import fetch_api_page, fetch_currencies, read_api_page
from .logger import get_module_logger, setup_logger
from .markdown import MarkdownConverter
from .schemas import CustomSchema
from .sections import parse_navigation, parse_sections
from .version import parse_last_version

logger = get_module_logger("main")

# Navigation groups before "Getting updates" describe the HTTP interface,
# not the API reference.
FIRST_API_GROUP = 3

# Telegram Stars are not in currencies.json
STARS_CURRENCY = "XTR"


class SchemaBuilder:
    """
    Main orchestrator for schema building.

    1. Version header and navigation tree
    2. Sections of the API reference groups
    3. Assembly into CustomSchema (types resolved per table row)
    """

    def __init__(
        self,
        log_level: int = None,
        converter: Optional[MarkdownConverter] = None,
        api_url: Optional[str] = None,
        currencies_url: Optional[str] = None
    ):
        if log_level is not None:
            setup_logger(level=log_level)

        self.converter = converter or MarkdownConverter()
        self.api_url = api_url
        self.currencies_url = currencies_url

        logger.info("SchemaBuilder initialized")

    def build(self, html: str, currencies: Optional[list[str]] = None) -> CustomSchema:
        """
        Build the schema from the documentation page HTML.

        Args:
            html: Full documentation page
            currencies: Currency codes for the Currencies enum

        Returns:
            CustomSchema

        Raises:
            ScrapeError: if the version header or release date is missing
        """
        logger.info("Starting pipeline")

        soup = load_document(html)
        version = parse_last_version(soup)

        nav = parse_navigation(soup)
        sections = parse_sections(soup, nav[FIRST_API_GROUP:])
        # Prose headings like "Formatting options" are not types or methods
        sections = [s for s in sections if " " not in s.title]

        currencies = list(currencies or [])
        currencies.append(STARS_CURRENCY)

        schema = to_custom_schema(version, sections, currencies, converter=self.converter)
        logger.info(f"Complete: {len(schema.methods)} methods, {len(schema.objects)} objects")
        return schema

    def build_from_url(self, include_currencies: bool = True) -> CustomSchema:
        """Download the page (and currencies) and build the schema."""
        html = fetch_api_page(self.api_url)
        currencies = fetch_currencies(self.currencies_url) if include_currencies else []
        return self.build(html, currencies)

    def build_from_file(
        self,
        file_path: Union[str, Path],
        currencies: Optional[list[str]] = None
    ) -> CustomSchema:
        """Build the schema from a saved copy of the page."""
        return self.build(read_api_page(file_path), currencies)


def build_schema(html: str, currencies: Optional[list[str]] = None) -> CustomSchema:
    """Convenience function to build a schema from page HTML."""
    return SchemaBuilder().build(html, currencies)


def build_schema_from_url(include_currencies: bool = True) -> CustomSchema:
    """Convenience function to build a schema from the live documentation."""
    return SchemaBuilder().build_from_url(include_currencies=include_currencies)

"""
HTML loading helpers shared by the scraper and the description parser.

Parser fallback chain: html5lib → lxml → html.parser.
html5lib follows the WHATWG algorithm, so it reproduces what a browser shows
for the documentation page; the other two are only used if it fails.
"""

import re
from html import unescape
from typing import Union

from bs4 import BeautifulSoup, FeatureNotFound, Tag
from bs4.builder import ParserRejectedMarkup

from .logger import get_module_logger

logger = get_module_logger("dom")

PARSERS = ("html5lib", "lxml", "html.parser")

# A missing parser library or markup the parser refuses; anything else,
# RecursionError included, propagates
PARSER_ERRORS = (FeatureNotFound, ParserRejectedMarkup, ValueError)

IMG_TAG_PATTERN = re.compile(r"<img[^>]*>", re.IGNORECASE)
TAG_PATTERN = re.compile(r"<[^>]+>")
WHITESPACE_PATTERN = re.compile(r"\s+")


def load_document(html: str) -> BeautifulSoup:
    """Parse a full HTML document, falling back through PARSERS."""
    last_error = None
    for parser in PARSERS:
        try:
            return BeautifulSoup(html, parser)
        except PARSER_ERRORS as e:
            logger.warning(f"{parser} parsing failed: {e}")
            last_error = e
    raise last_error


def load_fragment(html: str) -> Union[Tag, BeautifulSoup]:
    """
    Parse an HTML fragment and return the element holding its nodes.

    html5lib and lxml wrap fragments in <html><body>; html.parser does not,
    in which case the soup itself is the container.
    """
    soup = load_document(html or "")
    return soup.body or soup


def fragment_text(html: str) -> str:
    """Tag-stripped, whitespace-collapsed text of a fragment (images dropped)."""
    text = IMG_TAG_PATTERN.sub("", html or "")
    text = TAG_PATTERN.sub(" ", text)
    return WHITESPACE_PATTERN.sub(" ", unescape(text)).strip()

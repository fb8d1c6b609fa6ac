import logging
from typing import Optional

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


class HTMLParser:
    """Turns a response body into a queryable document"""

    def __init__(self, features: str = 'html.parser'):
        self.features = features

    def parse(self, html_content: Optional[str]) -> Optional[BeautifulSoup]:
        """Parse HTML content, returning None when there is nothing to query"""
        if not html_content or not html_content.strip():
            return None

        try:
            return BeautifulSoup(html_content, self.features)
        except Exception as e:
            logger.warning(f"Failed to parse HTML: {e}")
            return None


def text_of(page: BeautifulSoup, selector: str) -> Optional[str]:
    """Stripped text of the first element matching ``selector``"""
    element = page.select_one(selector)
    if element is None:
        return None
    text = element.get_text(' ', strip=True)
    return text or None

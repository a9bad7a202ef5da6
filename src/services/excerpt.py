"""HTML to text excerpt conversion for tagging prompts."""
import re

import html2text
from bs4 import BeautifulSoup, Comment

from services.exceptions import ExcerptFailedError

MAX_EXCERPT_CHARS = 3500

# Aggressive cleanup: scripts and embeds, navigation chrome, and form markup
NOISE_TAGS = [
    'script', 'style', 'noscript', 'template', 'iframe', 'object', 'embed',
    'svg', 'canvas',
    'nav', 'header', 'footer', 'aside', 'menu',
    'form', 'input', 'button', 'select', 'option', 'textarea', 'label',
    'fieldset', 'dialog',
]
NAVIGATION_ROLES = [
    'navigation', 'banner', 'contentinfo', 'menu', 'menubar', 'search',
    'complementary', 'dialog', 'form',
]

_BLANK_LINES = re.compile(r'\n{3,}')
_TRAILING_SPACE = re.compile(r'[ \t]+\n')


def _build_converter() -> html2text.HTML2Text:
    """Create an html2text converter tuned for compact prompt text."""
    converter = html2text.HTML2Text()
    converter.ignore_links = True
    converter.ignore_images = True
    converter.ignore_emphasis = False
    converter.ignore_tables = False
    converter.body_width = 0  # no hard wrapping
    converter.unicode_snob = True
    return converter


def _remove(elements: list) -> None:
    """Decompose matched elements, skipping ones already gone with an ancestor."""
    for element in elements:
        if not element.decomposed:
            element.decompose()


def clean_html(html: str | bytes, encoding: str | None = None) -> BeautifulSoup:
    """
    Parse HTML and strip everything that is not page content.

    Pure function with no I/O. Removes scripts/styles, navigation chrome
    (nav, header, footer, aside and ARIA navigation landmarks), form markup,
    and HTML comments.

    Args:
        html: Raw HTML as text, or undecoded bytes.
        encoding: Charset declared by the HTTP response for byte input. When
            omitted, the charset is detected from meta tags or a BOM.

    Returns:
        The cleaned document tree.
    """
    if isinstance(html, bytes) and encoding:
        soup = BeautifulSoup(html, 'lxml', from_encoding=encoding)
    else:
        soup = BeautifulSoup(html, 'lxml')

    _remove(soup.find_all(NOISE_TAGS))
    _remove(soup.find_all(attrs={'role': NAVIGATION_ROLES}))
    _remove(soup.find_all(attrs={'aria-hidden': 'true'}))
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    return soup


def excerpt_html(
    html: str | bytes,
    max_chars: int = MAX_EXCERPT_CHARS,
    encoding: str | None = None,
) -> str:
    """
    Reduce an HTML page to a compact markdown-like excerpt.

    The result is truncated to the first `max_chars` characters (code points, not
    bytes), so truncation never splits a multi-byte character.

    Args:
        html: Raw HTML as text or bytes.
        max_chars: Maximum excerpt length in characters.
        encoding: Charset declared by the HTTP response, used for byte input.

    Returns:
        Markdown-like text, at most `max_chars` characters long.

    Raises:
        ExcerptFailedError: If parsing or conversion fails.
    """
    try:
        soup = clean_html(html, encoding)
        markdown = _build_converter().handle(str(soup))
    except Exception as e:
        raise ExcerptFailedError(str(e) or type(e).__name__) from e

    markdown = _TRAILING_SPACE.sub('\n', markdown)
    markdown = _BLANK_LINES.sub('\n\n', markdown).strip()
    return markdown[:max_chars]

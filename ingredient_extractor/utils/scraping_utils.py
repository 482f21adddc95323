import requests
from bs4 import BeautifulSoup
from typing import Optional

from ingredient_extractor.errors import FetchError, HTTPStatusError

# Whole elements whose content must never reach the model, text included.
NON_CONTENT_TAGS = ["script", "style", "noscript", "template", "iframe", "object", "embed", "svg", "math"]


def fetch_html(url: str, timeout: Optional[float] = None) -> str:
    """GET the page and return its body as text. Raises FetchError on any failure."""
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise FetchError(f"error fetching {url}: {e}") from e

    if not 200 <= response.status_code < 300:
        raise HTTPStatusError(url, response.status_code)
    return decode_body(response)


def decode_body(response: requests.Response) -> str:
    """Decode the body, honouring a declared charset.

    Without one requests assumes ISO-8859-1 for text/*, which garbles UTF-8 pages.
    """
    if "charset" in response.headers.get("content-type", "").lower():
        return response.text
    try:
        return response.content.decode("utf-8")
    except UnicodeDecodeError:
        response.encoding = response.apparent_encoding
        return response.text


def strip_non_content(html_content: str) -> str:
    """Remove scripts, styles and embedded documents, keeping the rest of the markup."""
    soup = BeautifulSoup(html_content, "html.parser")
    for tag in soup(NON_CONTENT_TAGS):
        tag.decompose()
    return str(soup)

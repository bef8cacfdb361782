from __future__ import annotations

from urllib.parse import urljoin

from bs4 import BeautifulSoup, SoupStrainer

# Only <a href> elements matter; skipping the rest keeps parsing cheap.
_ANCHORS = SoupStrainer("a", href=True)


def extract_links(html: str, base_url: str) -> list[str]:
    """Absolute URLs of every anchor in ``html``, resolved against ``base_url``."""
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser", parse_only=_ANCHORS)
    links: list[str] = []
    for a in soup.find_all("a", href=True):
        href = str(a.get("href") or "").strip()
        try:
            links.append(urljoin(base_url, href))
        except ValueError:
            continue
    return links

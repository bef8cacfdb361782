from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from .crawler import Page
from .links import extract_links


@dataclass(frozen=True)
class Corpus:
    """Lowercase views over a crawl that every rubric signal reads from."""

    text: str
    links_text: str
    paths: frozenset[str]

    def has_any(self, keywords: Iterable[str]) -> list[str]:
        return [k for k in keywords if k.lower() in self.text]

    def links_have_any(self, keywords: Iterable[str]) -> list[str]:
        return [k for k in keywords if k.lower() in self.links_text]

    def has_page(self, *paths: str) -> bool:
        return any(p in self.paths for p in paths)


def build_corpus(pages: Mapping[str, Page]) -> Corpus:
    text = "\n".join(p.body for p in pages.values()).lower()
    links: list[str] = []
    for page in pages.values():
        links.extend(extract_links(page.body, page.url))
    return Corpus(text=text, links_text=" ".join(links).lower(), paths=frozenset(pages))

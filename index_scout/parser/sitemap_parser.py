# File: index_scout/parser/sitemap_parser.py
"""index_scout.parser.sitemap_parser: Разбор sitemap.xml и sitemap index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from lxml import etree


@dataclass(slots=True)
class SitemapEntries:
    """Page URLs of a ``<urlset>`` or child sitemaps of a ``<sitemapindex>``."""

    pages: List[str] = field(default_factory=list)
    sitemaps: List[str] = field(default_factory=list)


def parse_sitemap(xml_content: Union[str, bytes]) -> SitemapEntries:
    """Разбирает XML sitemap и возвращает URL из тегов <loc>.

    Для ``<sitemapindex>`` адреса попадают в ``sitemaps``, для ``<urlset>`` —
    в ``pages``. Битый или пустой XML даёт пустой результат.

    Пример:
    ```python
    from index_scout.parser.sitemap_parser import parse_sitemap

    entries = parse_sitemap(open('sitemap.xml', 'rb').read())
    print(entries.pages)
    ```
    """
    if isinstance(xml_content, str):
        xml_content = xml_content.encode("utf-8")
    if not xml_content.strip():
        return SitemapEntries()

    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False)
    try:
        root = etree.fromstring(xml_content, parser=parser)
    except etree.XMLSyntaxError:
        return SitemapEntries()
    if root is None:
        return SitemapEntries()

    locs = [loc.text.strip() for loc in root.findall(".//{*}loc") if loc.text and loc.text.strip()]
    if etree.QName(root).localname == "sitemapindex":
        return SitemapEntries(sitemaps=locs)
    return SitemapEntries(pages=locs)

# File: index_scout/parser/__init__.py
from index_scout.parser.sitemap_parser import SitemapEntries, parse_sitemap

__all__ = ["SitemapEntries", "parse_sitemap"]

"""Crawl frontier, page fetching and the per-batch crawl pipeline."""

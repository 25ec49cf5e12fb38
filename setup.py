# setup.py
from setuptools import setup, find_packages

setup(
    name="site_indexer",
    version="0.1.0",
    description="Incremental single-site crawler with a fuzzy full-text search index",
    packages=find_packages(include=["site_indexer", "site_indexer.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "playwright>=1.40",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "redis>=5.0.1",
        "Whoosh-Reloaded>=2.7.5",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "site-indexer=site_indexer.cli:cli",
        ],
    },
    python_requires=">=3.11",
)

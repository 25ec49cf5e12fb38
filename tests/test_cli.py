# File: tests/test_cli.py
"""Тесты для CLI (`site_indexer.cli`) с использованием click.testing.CliRunner.
Проверяют команды `crawl`, `search`, `config`, `--version`, а также коды ошибок.
"""
import asyncio
import importlib
import json

import pytest
from click.testing import CliRunner

cli_module = importlib.import_module("site_indexer.cli")
from site_indexer.cli import cli
from site_indexer.crawler.models import CrawlSummary
from site_indexer.engine import Engine
from site_indexer.errors import EmptyFrontierError, StoreUnavailableError


@pytest.fixture()
def cfg_file(tmp_path):
    """Временный конфиг (JSON является валидным YAML) со снимком индекса в tmp_path."""
    path = tmp_path / "config.yaml"
    path.write_text(
        json.dumps(
            {
                "base_url": "https://example.com/",
                "use_browser": False,
                "retry_delay": 0,
                "snapshot_path": str(tmp_path / "index.json"),
            }
        ),
        encoding="utf-8",
    )
    return path


def run(cfg_file, *args):
    runner = CliRunner()
    return runner.invoke(cli, ["--config", str(cfg_file), "--log-level", "ERROR", *args])


class FakeEngine:
    """Engine без Redis и сети: crawl возвращает фиксированную сводку."""

    error = None
    delay = 0.0

    def __init__(self, config):
        self.config = config

    async def crawl(self):
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return CrawlSummary(
            crawl_id="crawl-1",
            pages_crawled=1,
            crawled_urls=[self.config.seed_url],
            indexed_documents=1,
        )


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SiteIndexer" in result.output


def test_show_config(cfg_file):
    result = run(cfg_file, "config")
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["base_url"] == "https://example.com/"
    assert data["batch_size"] == 20


def test_batch_size_override(cfg_file):
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "-b", "5", "config"])
    assert result.exit_code == 0
    assert json.loads(result.output)["batch_size"] == 5


def test_invalid_config(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("base_url: not-a-url\n", encoding="utf-8")
    result = CliRunner().invoke(cli, ["--config", str(bad), "config"])
    assert result.exit_code == 1


def test_crawl_prints_summary(cfg_file, monkeypatch):
    monkeypatch.setattr(cli_module, "Engine", FakeEngine)
    result = run(cfg_file, "crawl")
    assert result.exit_code == 0
    summary = json.loads(result.output)
    assert summary["crawlId"] == "crawl-1"
    assert summary["crawledUrls"] == ["https://example.com"]
    assert summary["indexedDocuments"] == 1


@pytest.mark.parametrize(
    "error",
    [EmptyFrontierError("No URLs to crawl"), StoreUnavailableError("connection refused")],
)
def test_crawl_errors(cfg_file, monkeypatch, error):
    monkeypatch.setattr(FakeEngine, "error", error)
    monkeypatch.setattr(cli_module, "Engine", FakeEngine)
    result = run(cfg_file, "crawl")
    assert result.exit_code == 1
    assert str(error) in result.output


def test_crawl_timeout(cfg_file, monkeypatch):
    monkeypatch.setattr(FakeEngine, "delay", 2.0)
    monkeypatch.setattr(cli_module, "Engine", FakeEngine)
    result = run(cfg_file, "crawl", "--crawl-timeout", "0.1")
    assert result.exit_code != 0
    assert "не завершён" in result.output


def test_search_outputs_hits(cfg_file, tmp_path, make_document):
    Engine(Engine.load_config(str(cfg_file))).index(
        [
            make_document("https://example.com/oil", title="Engine oil"),
            make_document("https://example.com/about", title="About"),
        ]
    )
    result = run(cfg_file, "search", "oil", "--limit", "5")
    assert result.exit_code == 0
    hits = json.loads(result.output)
    assert [h["url"] for h in hits] == ["https://example.com/oil"]


def test_search_without_query(cfg_file):
    result = run(cfg_file, "search")
    assert result.exit_code == 2


def test_search_on_empty_index(cfg_file):
    result = run(cfg_file, "search", "oil")
    assert result.exit_code == 3

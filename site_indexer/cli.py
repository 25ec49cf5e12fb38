# === FILE: site_indexer/cli.py ===
#!/usr/bin/env python3
"""
Точка входа SiteIndexer через командную строку.

Команды:
  crawl     Обойти очередную пачку URL и обновить снимок индекса
  search    Выполнить поисковый запрос по снимку индекса
  serve     Запустить HTTP-сервер (POST /api/crawl, GET /api/search)
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml)
  --batch-size INT    Макс. число URL за запуск (override batch_size)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Дополнительно:
  --version, -v       Показать версию SiteIndexer

Пример:
  site-indexer --config configs/default.yaml crawl --pretty
  site-indexer search "lubricant"
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from aiohttp import web

from site_indexer import __version__
from site_indexer.config import load_config
from site_indexer.engine import Engine
from site_indexer.errors import (
    EmptyFrontierError,
    IndexEmptyError,
    InvalidQueryError,
    SiteIndexerError,
)
from site_indexer.logger import init_logging, logger
from site_indexer.web import create_app

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str, code: int = 1):
    click.secho(message, fg='red', err=True)
    sys.exit(code)


def _dump(data, pretty: bool) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2 if pretty else None)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteIndexer, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/default.yaml',
    show_default=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--batch-size', '-b', 'batch_size',
    type=click.IntRange(min=1),
    default=None,
    help='Макс. число URL за один запуск обхода (override batch_size)'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(name)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, batch_size, log_level, log_file, log_format):
    """Группа команд SiteIndexer CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    if batch_size is not None:
        cfg.batch_size = batch_size
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Таймаут всего обхода (секунд)'
)
@click.pass_context
def crawl(ctx, pretty, crawl_timeout):
    """Обойти пачку URL из очереди и обновить индекс."""
    cfg = ctx.obj['config']
    engine = Engine(cfg)
    logger.info('Starting crawl of %s', cfg.seed_url)
    try:
        if crawl_timeout:
            summary = asyncio.run(asyncio.wait_for(engine.crawl(), timeout=crawl_timeout))
        else:
            summary = asyncio.run(engine.crawl())
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {crawl_timeout} секунд')
    except EmptyFrontierError as e:
        print_error(f'Нечего обходить: {e}')
    except SiteIndexerError as e:
        print_error(f'Ошибка при обходе: {e}')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')
    click.echo(_dump(summary.dump(), pretty))


@cli.command('search', context_settings=CONTEXT_SETTINGS)
@click.argument('query', required=False)
@click.option('--limit', '-l', type=click.IntRange(min=1), default=None, help='Макс. число результатов')
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.pass_context
def search(ctx, query, limit, pretty):
    """Найти документы по запросу QUERY."""
    engine = Engine(ctx.obj['config'])
    try:
        hits = engine.search(query, limit=limit)
    except InvalidQueryError as e:
        print_error(f'Некорректный запрос: {e}', code=2)
    except IndexEmptyError as e:
        print_error(f'Индекс пуст: {e}', code=3)
    except SiteIndexerError as e:
        print_error(f'Ошибка поиска: {e}')
    click.echo(_dump(hits, pretty))


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default='127.0.0.1', show_default=True, help='Адрес для прослушивания')
@click.option('--port', default=8080, show_default=True, type=int, help='Порт')
@click.pass_context
def serve(ctx, host, port):
    """Запустить HTTP-сервер с триггерами обхода и поиска."""
    app = create_app(Engine(ctx.obj['config']))
    web.run_app(app, host=host, port=port)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()

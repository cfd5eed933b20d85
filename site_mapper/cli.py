#!/usr/bin/env python3
"""
Точка входа для запуска SiteMapper через командную строку.

Использование:
  site-mapper [OPTIONS] DOMAIN

Опции:
  --show-backrefs        Показывать ссылки на уже найденные страницы
  --config PATH          YAML/JSON-файл с параметрами CrawlerConfig
  --user-agent TEXT      Заголовок User-Agent
  --timeout SEC          Таймаут одного HTTP-запроса
  --wait-timeout SEC     Сколько ждать дочерние задачи одного уровня
  --max-concurrency INT  Максимум одновременных HTTP-запросов
  --log-level LEVEL      Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH        Файл для логов (stderr, если не указан)
  --version, -v          Показать версию SiteMapper

Пример:
  site-mapper --show-backrefs example.com
"""
import asyncio
import sys
from pathlib import Path

import click

from site_mapper import __version__
from site_mapper.config import load_config
from site_mapper.engine import start_crawl
from site_mapper.errors import SiteMapperError
from site_mapper.logger import init_logging
from site_mapper.report.tree_report import render_tree

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteMapper, version %(version)s')
@click.argument('domain')
@click.option(
    '--show-backrefs', 'show_backrefs',
    is_flag=True,
    help='Show references to previously parsed / lower pages in the map tree.'
)
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option('--user-agent', 'user_agent', default=None, help='Заголовок User-Agent.')
@click.option('--timeout', 'timeout', type=float, default=None, help='Таймаут одного запроса (секунд).')
@click.option(
    '--wait-timeout', 'wait_timeout',
    type=float,
    default=None,
    help='Сколько ждать дочерние задачи одного уровня (секунд).'
)
@click.option(
    '--max-concurrency', 'max_concurrency',
    type=int,
    default=None,
    help='Максимум одновременных HTTP-запросов.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
def cli(domain, show_backrefs, config_path, user_agent, timeout, wait_timeout,
        max_concurrency, log_level, log_file):
    """Map every page of DOMAIN reachable from its root and print the tree."""
    init_logging(level=log_level, log_file=str(log_file) if log_file else None)
    try:
        cfg = load_config(
            config_path,
            user_agent=user_agent,
            timeout=timeout,
            wait_timeout=wait_timeout,
            max_concurrency=max_concurrency,
        )
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')

    try:
        root = asyncio.run(start_crawl(cfg, domain))
    except SiteMapperError as e:
        print_error(f'Ошибка при обходе: {e}')

    click.echo(render_tree(root, show_backrefs=show_backrefs))


if __name__ == "__main__":
    cli()

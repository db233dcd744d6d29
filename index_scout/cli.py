# === FILE: index_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа IndexScout: сверка статусов индексации и запросы на индексацию.

Аргумент:
  TARGET              Домен (example.com), URL сайта (https://example.com/) или путь к .csv

Опции:
  --credentials, -c PATH  JSON-ключ сервисного аккаунта (default: service_account.json)
  --config PATH           YAML/JSON-конфиг, значения CLI имеют приоритет
  --cache-dir DIR         Каталог кэша статусов (default: .cache)
  --batch-size INT        Число одновременных запросов статуса (default: 50)
  --json PATH             Сохранить JSON-отчёт о запуске
  --log-level LEVEL       Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH         Файл для логов
  --log-format FORMAT     Формат логирования
  --version, -v           Показать версию IndexScout

Коды выхода: 0 — успех, 1 — нет аргумента, нет ключа, нет sitemap, исчерпана квота.

Пример:
  index-scout example.com --credentials service_account.json --json run.json
"""
import asyncio
import sys
from pathlib import Path

import click

from index_scout import __version__
from index_scout.config import load_config
from index_scout.engine import Engine, RunReport
from index_scout.errors import IndexScoutError
from index_scout.gsc.status import get_emoji_for_status
from index_scout.logger import init_logging
from index_scout.report import render_json
from index_scout.submitter import SubmissionOutcome

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])

_OUTCOME_MESSAGES = {
    SubmissionOutcome.REQUESTED: "🚀 Indexing requested successfully. It may take a few days for Google to process it.",
    SubmissionOutcome.ALREADY_REQUESTED: "🕛 Indexing already requested previously. It may take a few days for Google to process it.",
    SubmissionOutcome.SKIPPED: "⏭️  Skipped, see the log for details.",
}


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _print_indexable(report: RunReport) -> None:
    if report.buckets:
        total = sum(len(urls) for urls in report.buckets.values())
        click.echo(f"👍 Done, here's the status of all {total} pages:")
        for status, urls in report.buckets.items():
            click.echo(f"• {get_emoji_for_status(status)} {status}: {len(urls)} pages")
        click.echo("")

    if not report.indexable:
        click.echo("✨ There are no pages that can be indexed. Everything is already indexed!")
    else:
        click.echo(f"✨ Found {len(report.indexable)} pages that can be indexed.")
        for url in report.indexable:
            click.echo(f"• {url}")
    click.echo("")


def _print_discovered(page_count: int, sitemap_count: int) -> None:
    click.echo(f"👉 Found {page_count} URLs in {sitemap_count} sitemap")


def _print_batch(batch_index: int, batch_count: int) -> None:
    click.echo(f"📦 Batch {batch_index + 1} of {batch_count} complete")


def _print_outcome(url: str, outcome: SubmissionOutcome) -> None:
    click.echo(f"📄 {url}")
    click.echo(_OUTCOME_MESSAGES[outcome])


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='IndexScout, version %(version)s')
@click.argument('target', required=False)
@click.option(
    '--credentials', '-c', 'credentials',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Путь к JSON-ключу сервисного аккаунта.  [default: service_account.json]'
)
@click.option(
    '--config', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--cache-dir', 'cache_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Каталог кэша статусов.  [default: .cache]'
)
@click.option(
    '--batch-size', 'batch_size',
    default=None,
    type=click.IntRange(min=1),
    help='Число одновременных запросов статуса.  [default: 50]'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
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
    help='Путь к файлу логов'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
def cli(target, credentials, config_path, cache_dir, batch_size, json_output, log_level, log_file, log_format):
    """Проверить статусы индексации сайта и запросить индексацию для неиндексированных страниц."""
    if not target:
        print_error("❌ Please provide a domain, a site URL or a CSV as the first argument.")

    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(
            config_path,
            target=target,
            credentials=credentials,
            cache_dir=cache_dir,
            batch_size=batch_size,
        )
    except (OSError, ValueError, TypeError) as e:
        print_error(f'❌ Ошибка загрузки конфигурации: {e}')

    if not cfg.is_csv:
        click.echo(f"🔎 Processing site: {cfg.site_url}")

    engine = Engine(
        cfg,
        on_indexable=_print_indexable,
        on_discovered=_print_discovered,
        on_batch_complete=_print_batch,
        on_outcome=_print_outcome,
    )
    try:
        report = asyncio.run(engine.run())
    except IndexScoutError as e:
        print_error(f'❌ {e}')

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'❌ Ошибка при сохранении JSON: {e}')

    if report.submission.halted:
        print_error(f'❌ {report.submission.rate_limit}')

    click.echo("👍 All done!")


if __name__ == "__main__":
    cli()

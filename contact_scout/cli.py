# === FILE: contact_scout/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point of ContactScout.

Commands:
  resolve   Resolve contact details for profiles stored in a JSON file
  crawl     Crawl one website directly and print what was found
  config    Show the effective configuration

Common options:
  --config PATH       YAML/JSON config (default: configs/default.yaml if present)
  --limit INT         Max pages per crawl (overrides max_pages)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only when omitted)
  --log-format FORMAT Logging format string

Example:
  contact-scout resolve profiles.json --caller 10.0.0.7 --json contacts.json --pretty
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from pydantic import TypeAdapter, ValidationError

from contact_scout import __version__
from contact_scout.config import load_config
from contact_scout.engine import crawl_site, resolve_profiles
from contact_scout.errors import CrawlExhausted, InvalidTarget
from contact_scout.logger import init_logging
from contact_scout.models import PrimaryProfile, QuotaSession
from contact_scout.report.html_report import render_html
from contact_scout.report.json_report import render_json

CONTEXT_SETTINGS = dict(help_option_names=["--help"])

EXIT_RATE_LIMITED = 2

_PROFILES = TypeAdapter(list[PrimaryProfile])


def print_error(message: str, code: int = 1):
    click.secho(message, fg='red', err=True)
    sys.exit(code)


def _read_profiles(path: Path) -> list[PrimaryProfile]:
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise ValueError(f'Invalid JSON in {path}: {e}') from e
    if isinstance(data, dict):
        data = [data]
    return _PROFILES.validate_python(data)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='ContactScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to a YAML/JSON config file.'
)
@click.option(
    '--limit', '-l', 'limit',
    type=click.IntRange(min=1),
    default=None,
    help='Max pages per crawl (overrides max_pages)'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stdout only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, limit, log_level, log_file, log_format):
    """ContactScout command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load config: {e}')
    if limit is not None:
        cfg = cfg.model_copy(update={'max_pages': limit})
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('resolve', context_settings=CONTEXT_SETTINGS)
@click.argument('profiles_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '--caller', 'caller',
    default='cli', show_default=True,
    help='Caller identity used for the per-minute rate limit'
)
@click.option(
    '--session-file', 'session_file',
    default='.contact_scout_session.json', show_default=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help='File holding the daily request counter'
)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save a JSON report to this file'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save an HTML report to this file'
)
@click.option(
    '--pretty', is_flag=True,
    help='Indent JSON output by 2 spaces'
)
@click.pass_context
def resolve(ctx, profiles_path, caller, session_file, json_output, html_output, pretty):
    """Resolve contact details for the profiles in PROFILES_PATH."""
    cfg = ctx.obj['config']
    try:
        profiles = _read_profiles(profiles_path)
        session = QuotaSession.load(session_file)
    except (ValueError, TypeError, ValidationError) as e:
        print_error(f'Invalid input: {e}')

    try:
        results = asyncio.run(resolve_profiles(cfg, profiles, caller, session))
    except Exception as e:
        print_error(f'Resolution failed: {e}')
    finally:
        session.save(session_file)

    if not json_output and not html_output:
        indent = 2 if pretty else None
        click.echo(json.dumps([r.to_dict() for r in results], ensure_ascii=False, indent=indent))

    if json_output:
        try:
            saved_json = render_json(results, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Failed to save JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(results, html_output)
            click.echo(f'HTML report: {saved_html}')
        except OSError as e:
            print_error(f'Failed to save HTML: {e}')

    rejected = [r for r in results if r.error is not None]
    for r in rejected:
        click.secho(f'{r.name}: {r.error.user_message}', fg='yellow', err=True)
    if rejected:
        sys.exit(EXIT_RATE_LIMITED)


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option(
    '--deadline', 'deadline',
    type=float, default=None,
    help='Stop after this many seconds and keep the partial result'
)
@click.option(
    '--strict', is_flag=True,
    help='Fail when no email was found'
)
@click.option(
    '--pretty', is_flag=True,
    help='Indent JSON output by 2 spaces'
)
@click.pass_context
def crawl(ctx, url, deadline, strict, pretty):
    """Crawl URL (same site only) and print the contact record."""
    cfg = ctx.obj['config']
    try:
        record = asyncio.run(crawl_site(cfg, url, deadline=deadline, strict=strict))
    except InvalidTarget as e:
        print_error(str(e))
    except CrawlExhausted as e:
        print_error(f'Nothing found: {e}')
    click.echo(json.dumps(record.to_dict(), ensure_ascii=False, indent=2 if pretty else None))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective configuration as JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()

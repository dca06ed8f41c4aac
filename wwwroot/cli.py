"""wwwroot CLI - serve a document root or inspect static decisions.

Commands:
    serve  - Serve a document root under uvicorn
    check  - Show how the static stage would answer a request path
"""

import logging
import sys
from typing import Any, Dict, Optional

import click
import uvicorn

from . import __version__
from .asgi import create_app
from .config import ConfigLoader
from .faults import Fault
from .middleware_ext.static import StaticFilesMiddleware


def _static_options(func):
    """Options shared by every command that builds the static stage."""
    func = click.option('--charset', type=str, default=None, help='Charset for text content types')(func)
    func = click.option('--index', 'index_document', type=str, default=None,
                        help='Index document for root paths ("" disables)')(func)
    func = click.option('--prefix', 'url_prefix', type=str, default=None, help='Static URL prefix')(func)
    func = click.option('--root', 'document_root', type=str, default=None, help='Document root directory')(func)
    func = click.option('--env-file', type=click.Path(dir_okay=False), default=None,
                        help='.env file with WWWROOT_* settings')(func)
    return func


def _load(env_file: Optional[str], overrides: Dict[str, Any]) -> ConfigLoader:
    try:
        return ConfigLoader.load(env_file=env_file, overrides=overrides)
    except Fault as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__, prog_name='wwwroot')
def cli():
    """Static-file pipeline stage for ASGI applications."""


@cli.command('serve')
@_static_options
@click.option('--host', type=str, default=None, help='Bind host')
@click.option('--port', type=int, default=None, help='Bind port')
@click.option('--log-level', type=click.Choice(['debug', 'info', 'warning', 'error']),
              default=None, help='Log level')
def serve(env_file, document_root, url_prefix, index_document, charset, host, port, log_level):
    """
    Serve a document root.

    Examples:
      wwwroot serve --root ./public
      wwwroot serve --root ./public --prefix /static --port 8080
    """
    loader = _load(env_file, {
        'document_root': document_root,
        'url_prefix': url_prefix,
        'index_document': index_document,
        'charset': charset,
        'host': host,
        'port': port,
        'log_level': log_level,
    })
    try:
        config = loader.static_files_config()
        settings = loader.server_settings()
    except Fault as e:
        raise click.ClickException(str(e))

    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    click.echo(
        f"Serving {config.document_root} at http://{settings.host}:{settings.port}{config.url_prefix}"
    )
    app = create_app(config)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        access_log=False,
    )


@cli.command('check')
@_static_options
@click.argument('path')
def check(env_file, document_root, url_prefix, index_document, charset, path):
    """
    Show whether PATH would be served as a static file.

    Exits with status 1 when the request would pass through to routing.
    """
    loader = _load(env_file, {
        'document_root': document_root,
        'url_prefix': url_prefix,
        'index_document': index_document,
        'charset': charset,
    })
    try:
        stage = StaticFilesMiddleware.from_config(loader.static_files_config())
    except Fault as e:
        raise click.ClickException(str(e))

    match = stage.resolve(path)
    if match is None:
        click.echo(f"{path}: pass through")
        sys.exit(1)

    click.echo(f"{path}: served")
    click.echo(f"  file:         {match.file_name}")
    click.echo(f"  content-type: {match.content_type}")
    if match.is_index:
        click.echo("  index:        yes")


def main():
    """Entry point for the `wwwroot` command."""
    cli()


if __name__ == '__main__':
    main()

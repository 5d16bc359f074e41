"""routewire CLI - Main Entry Point.

Commands:
    routes - Print the compiled route table of a server
    serve  - Run a server's application under uvicorn

TARGET is ``module:attribute`` naming a RoutewireServer, or a callable
returning one.
"""

import importlib
import sys

import click

from . import __version__, __cli_name__
from ..server import RoutewireServer, configure_logging


def load_server(target: str) -> RoutewireServer:
    """
    Import ``module:attribute`` and return the RoutewireServer it names.

    Raises:
        click.BadParameter: If the target cannot be imported or is not a server
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise click.BadParameter(f"expected 'module:attribute', got {target!r}", param_hint="TARGET")

    if "" not in sys.path:
        sys.path.insert(0, "")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise click.BadParameter(f"cannot import {module_name!r}: {exc}", param_hint="TARGET") from exc

    obj = getattr(module, attr, None)
    if obj is None:
        raise click.BadParameter(f"{module_name!r} has no attribute {attr!r}", param_hint="TARGET")

    if not isinstance(obj, RoutewireServer) and callable(obj):
        obj = obj()
    if not isinstance(obj, RoutewireServer):
        raise click.BadParameter(
            f"{target!r} is not a RoutewireServer (got {type(obj).__name__})",
            param_hint="TARGET",
        )
    return obj


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, verbose: bool):
    """Controller routing for ASGI applications.

    \b
    Quick start:
      routewire routes myapp.main:server
      routewire serve myapp.main:server
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    if verbose:
        configure_logging("debug")


@cli.command('routes')
@click.argument('target')
def routes(target: str):
    """
    Print the route table, in routing priority order.

    Examples:
      routewire routes myapp.main:server
    """
    server = load_server(target)
    server.build_router()
    lines = server.table.describe(prefix=server.routing_config.root_path)

    if not lines:
        click.echo("No routes registered.")
        return

    for line in lines:
        click.echo(line)
    click.echo(click.style(f"\n{len(lines)} route(s)", fg="green"))


@cli.command('serve')
@click.argument('target')
@click.option('--host', default=None, help='Host to bind (default: server config)')
@click.option('--port', type=int, default=None, help='Port to bind (default: server config)')
@click.option('--reload', is_flag=True, help='Enable auto-reload')
@click.option('--log-level', default=None,
              type=click.Choice(['critical', 'error', 'warning', 'info', 'debug']),
              help='Log level (default: server config)')
def serve(target: str, host, port, reload: bool, log_level):
    """
    Serve the application with uvicorn.

    Examples:
      routewire serve myapp.main:server
      routewire serve myapp.main:server --port 9000 --log-level debug
    """
    server = load_server(target)
    server.run(host=host, port=port, reload=reload, log_level=log_level)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == '__main__':
    main()

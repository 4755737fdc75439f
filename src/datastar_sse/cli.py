#!/usr/bin/env python
"""datastar-sse CLI.

Commands:
    datastar-sse serve                      Start the demo server
    datastar-sse render merge-fragments     Print a rendered event
    datastar-sse render remove-fragments
    datastar-sse render merge-signals
    datastar-sse render remove-signals
    datastar-sse render execute-script
"""

import asyncio
import json
import sys

import click

from datastar_sse.errors import DatastarError


def _generator():
    from datastar_sse.protocol import ServerSentEventGenerator

    return ServerSentEventGenerator()


def _send_options(event_id: int | None, retry: int | None) -> dict[str, int]:
    options = {}
    if event_id is not None:
        options["event_id"] = event_id
    if retry is not None:
        options["retry_duration"] = retry
    return options


def _emit(render) -> None:
    """Run a render callable, turning protocol errors into CLI errors."""
    try:
        click.echo(render(), nl=False)
    except DatastarError as e:
        raise click.ClickException(e.message) from e


event_id_option = click.option("--event-id", type=int, default=None, help="Event id")
retry_option = click.option("--retry", type=int, default=None, help="Retry duration in milliseconds")


@click.group()
@click.version_option(version="0.1.0", prog_name="datastar-sse")
def cli() -> None:
    """datastar-sse - Datastar server-sent events for Python."""
    pass


@cli.command()
@click.option("--host", default=None, help="Host to bind to (default: settings.http_host)")
@click.option("--port", "-p", type=int, default=None, help="Port to bind to (default: settings.http_port)")
@click.option("--json-logs", is_flag=True, help="Emit JSON logs")
def serve(host: str | None, port: int | None, json_logs: bool) -> None:
    """Start the demo server.

    Examples:

        datastar-sse serve

        datastar-sse serve --port 3103
    """
    from datastar_sse.config import get_settings
    from datastar_sse.logging import setup_logging
    from datastar_sse.server import DatastarDemoServer

    settings = get_settings()
    setup_logging(settings.log_level, json_format=json_logs or settings.json_logs)

    server = DatastarDemoServer(settings)
    click.echo(click.style("Datastar demo server", fg="cyan", bold=True))
    click.echo(f"  http://{host or settings.http_host}:{port or settings.http_port}/")
    click.echo()
    asyncio.run(server.run(host=host, port=port))


@cli.group()
def render() -> None:
    """Render a single event to stdout."""
    from datastar_sse.config import get_settings
    from datastar_sse.logging import setup_logging

    settings = get_settings()
    # stdout carries only the rendered event
    setup_logging(settings.log_level, json_format=settings.json_logs, stream=sys.stderr)


@render.command("merge-fragments")
@click.argument("fragments", nargs=-1, required=True)
@click.option("--selector", default=None, help="CSS selector to merge into")
@click.option("--merge-mode", default=None, help="Merge mode (default: morph)")
@click.option("--settle-duration", type=int, default=None, help="Settle duration in milliseconds")
@click.option("--view-transition/--no-view-transition", default=None, help="Use a view transition")
@event_id_option
@retry_option
def render_merge_fragments(
    fragments: tuple[str, ...],
    selector: str | None,
    merge_mode: str | None,
    settle_duration: int | None,
    view_transition: bool | None,
    event_id: int | None,
    retry: int | None,
) -> None:
    """Render a merge-fragments event."""
    options = _send_options(event_id, retry)
    if selector is not None:
        options["selector"] = selector
    if merge_mode is not None:
        options["merge_mode"] = merge_mode
    if settle_duration is not None:
        options["settle_duration"] = settle_duration
    if view_transition is not None:
        options["use_view_transition"] = view_transition
    _emit(lambda: _generator().merge_fragments(list(fragments), options))


@render.command("remove-fragments")
@click.argument("selector")
@click.option("--settle-duration", type=int, default=None, help="Settle duration in milliseconds")
@click.option("--view-transition/--no-view-transition", default=None, help="Use a view transition")
@event_id_option
@retry_option
def render_remove_fragments(
    selector: str,
    settle_duration: int | None,
    view_transition: bool | None,
    event_id: int | None,
    retry: int | None,
) -> None:
    """Render a remove-fragments event."""
    options = _send_options(event_id, retry)
    if settle_duration is not None:
        options["settle_duration"] = settle_duration
    if view_transition is not None:
        options["use_view_transition"] = view_transition
    _emit(lambda: _generator().remove_fragments(selector, options))


@render.command("merge-signals")
@click.argument("signals")
@click.option("--only-if-missing", is_flag=True, help="Only set signals the client lacks")
@event_id_option
@retry_option
def render_merge_signals(signals: str, only_if_missing: bool, event_id: int | None, retry: int | None) -> None:
    """Render a merge-signals event from a JSON object."""
    try:
        parsed = json.loads(signals)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON: {e}", param_hint="SIGNALS") from e
    options = _send_options(event_id, retry)
    options["only_if_missing"] = only_if_missing
    _emit(lambda: _generator().merge_signals(parsed, options))


@render.command("remove-signals")
@click.argument("paths", nargs=-1, required=True)
@event_id_option
@retry_option
def render_remove_signals(paths: tuple[str, ...], event_id: int | None, retry: int | None) -> None:
    """Render a remove-signals event."""
    _emit(lambda: _generator().remove_signals(list(paths), _send_options(event_id, retry)))


@render.command("execute-script")
@click.argument("script_file", type=click.File("r"), default="-")
@click.option("--auto-remove/--no-auto-remove", default=None, help="Remove the script tag after running")
@event_id_option
@retry_option
def render_execute_script(script_file, auto_remove: bool | None, event_id: int | None, retry: int | None) -> None:
    """Render an execute-script event from a file (or stdin)."""
    script = script_file.read()
    options = _send_options(event_id, retry)
    if auto_remove is not None:
        options["auto_remove"] = auto_remove
    _emit(lambda: _generator().execute_script(script, options))


def main() -> None:
    """Entry point."""
    cli(prog_name="datastar-sse")


if __name__ == "__main__":
    sys.exit(main())

"""CLI entry point for termnotify."""

import sys
from dataclasses import asdict
from pathlib import Path

import click
import yaml

from termnotify import __version__
from termnotify.config import load_config
from termnotify.logging import mask_secret, setup_logging


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to config file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log at DEBUG level.")
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """Terminal Notifier - AI-gated alerts for terminal sessions."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config)
    ctx.obj["logger"] = setup_logging(ctx.obj["config"], verbose=verbose)


@main.command()
def version() -> None:
    """Show version."""
    click.echo(f"termnotify version {__version__}")


@main.command("config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Show the effective configuration."""
    data = asdict(ctx.obj["config"])
    data["classifier"]["api_key"] = mask_secret(data["classifier"]["api_key"])
    click.echo(yaml.safe_dump(data, sort_keys=False).rstrip())


@main.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option("--label", "-l", default="terminal", help="Session name shown to the judge.")
@click.pass_context
def classify(ctx: click.Context, source, label: str) -> None:
    """Ask the classifier whether SOURCE (default stdin) needs attention."""
    import asyncio

    from termnotify.classifier import ClassifierClient

    config = ctx.obj["config"]
    if not config.classifier.is_configured:
        click.echo("Error: classifier endpoint and api_key must be configured", err=True)
        raise SystemExit(1)

    content = source.read()

    async def _alert(message: str) -> None:
        click.echo(message, err=True)

    async def _classify() -> bool:
        async with ClassifierClient(alert=_alert) as client:
            return await client.decide(content, label, config.classifier)

    verdict = asyncio.run(_classify())
    click.echo("YES" if verdict else "NO")


@main.command()
@click.argument("commands", nargs=-1, required=True)
@click.pass_context
def watch(ctx: click.Context, commands: tuple[str, ...]) -> None:
    """Run COMMANDS as monitored sessions and alert when one needs you.

    Each argument is one shell command, e.g.:

        termnotify watch "make test" "npm run build"
    """
    import asyncio

    from termnotify.commands import CMD_CHECK_NOW, activate
    from termnotify.console import ConsoleHost, ConsoleWindow
    from termnotify.monitor import TerminalMonitor

    config = ctx.obj["config"]
    if not config.classifier.is_configured:
        click.echo(
            "Warning: classifier not configured, no notifications will be sent",
            err=True,
        )

    async def _watch() -> list[int]:
        window = ConsoleWindow()
        host = ConsoleHost(list(commands))
        monitor = TerminalMonitor(config, window)
        try:
            host_commands = await activate(monitor, host)
            codes = await host.run(monitor)
            await host_commands[CMD_CHECK_NOW]()
            await monitor.wait_for_notifications()
            host.close_all(monitor)
            return codes
        finally:
            await monitor.close()

    try:
        codes = asyncio.run(_watch())
    except KeyboardInterrupt:
        click.echo("\nCancelled")
        sys.exit(130)

    sys.exit(0 if all(code == 0 for code in codes) else 1)

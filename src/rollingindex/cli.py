import signal
import sys

# Handle Ctrl+C gracefully before any other imports
signal.signal(signal.SIGINT, lambda *_: sys.exit(130))

import logging
from datetime import datetime, timezone

import click
import typer

from .config import load_config, set_dotenv_path
from .errors import RollingIndexError
from .opensearch.client import (
	get_opensearch_client,
	check_connection,
	OpenSearchError,
)
from .router import BucketRouter
from .schema import Message
from .startup import start

app = typer.Typer()


def _fail(message):
	typer.echo(typer.style(f"Error: {message}", fg=typer.colors.RED), err=True)
	raise typer.Exit(1)


@app.callback()
def main_callback(
	env: str = typer.Option(None, "--env", help="Path to a .env file to load"),
	verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
	"""Rolling index writer and reader for OpenSearch."""
	if env:
		set_dotenv_path(env)
	logging.basicConfig(
		level=logging.DEBUG if verbose else logging.WARNING,
		format="%(asctime)s %(levelname)s %(name)s %(message)s",
	)


def require_repository():
	"""Connect, provision the template and return a repository. Exits on failure."""
	try:
		cfg = load_config()
		client = get_opensearch_client(cfg)
		check_connection(client, cfg)
		repository = start(cfg, client=client)
	except ValueError as e:
		_fail(f"Invalid configuration: {e}")
	except (OpenSearchError, RollingIndexError) as e:
		_fail(e)
	return repository, cfg


def _parse_at(at):
	if not at:
		return datetime.now(timezone.utc)
	try:
		return datetime.fromisoformat(at.replace("Z", "+00:00"))
	except ValueError:
		raise typer.BadParameter(f"not an ISO-8601 timestamp: {at!r}", param_hint="--at")


@app.command()
def init():
	"""Install the index template for bucket indices (idempotent)."""
	require_repository()
	typer.echo("Index template initialized.")


@app.command()
def target(
	at: str = typer.Option(None, "--at", help="ISO-8601 timestamp (default: now, UTC)"),
):
	"""Print the bucket index a write would target, and the read alias."""
	try:
		cfg = load_config()
	except ValueError as e:
		_fail(f"Invalid configuration: {e}")
	router = BucketRouter(cfg.index_name, granularity=cfg.granularity)
	typer.echo(f"write: {router.resolve_write_target(_parse_at(at))}")
	typer.echo(f"read:  {router.search_target()}")


@app.command()
def write(
	message: str = typer.Argument(..., help="Message text"),
	at: str = typer.Option(None, "--at", help="ISO-8601 timestamp (default: now, UTC)"),
	refresh: bool = typer.Option(False, "--refresh", help="Make the message searchable immediately"),
):
	"""Write a message into the current bucket index."""
	repository, _ = require_repository()
	now = _parse_at(at)
	index_name = repository.router.resolve_write_target(now)
	try:
		saved = repository.save(Message(message=message, timestamp=now), now=now, refresh=refresh or None)
	except RollingIndexError as e:
		_fail(e)
	typer.echo(f"{index_name} {saved.id}")


@app.command()
def search(
	q: str = typer.Option("", "--q", help="Match messages containing this text"),
	limit: int = typer.Option(50, "--limit"),
):
	"""Search messages across all buckets through the alias."""
	repository, _ = require_repository()
	try:
		if q:
			hits = repository.search_by_message(q, limit=limit)
		else:
			hits = repository.search_all(limit=limit)
	except RollingIndexError as e:
		_fail(e)

	if not hits:
		typer.echo(typer.style("No messages found.", dim=True), err=True)
	for hit in hits:
		timestamp = hit.content.timestamp.isoformat() if hit.content.timestamp else ""
		typer.echo(f"{hit.index} {hit.id} {timestamp} {hit.content.message}")


def main():
	if len(sys.argv) == 1:
		# No arguments: show help
		command = typer.main.get_command(app)
		ctx = click.Context(command)
		typer.echo(command.get_help(ctx), err=True)
		return 0
	try:
		app()
	except typer.Exit:
		raise
	except Exception as e:
		typer.echo(typer.style(
			f"Fatal error: {type(e).__name__}: {e}",
			fg=typer.colors.RED
		), err=True)
		sys.exit(1)

if __name__ == "__main__":
	main()

"""
CLI interface for docjoin.

Provides commands to validate join configuration and to run a query with
the configured joins applied, printing joined documents as JSON lines.

Joins and MongoDB settings come from config.yaml ($DOCJOIN_HOME or --config).
With --demo, documents come from an in-memory store seeded from a fixture
file instead of MongoDB.
"""

import json
import logging
import sys
from pathlib import Path

import click

from docjoin import __version__

logger = logging.getLogger(__name__)


def _require_config(ctx):
    if "config" not in ctx.obj:
        click.echo(f"✗ Config not loaded: {ctx.obj.get('config_error', 'Unknown error')}", err=True)
        raise SystemExit(1)
    return ctx.obj["config"]


@click.group()
@click.version_option(version=__version__, prog_name="docjoin")
@click.option(
    "--config", "config_path",
    type=click.Path(path_type=Path), default=None,
    help="Path to config.yaml (default: $DOCJOIN_HOME/config.yaml)",
)
@click.option("--log-level", default=None, help="Override logging.level from config")
@click.pass_context
def main(ctx, config_path, log_level):
    """
    docjoin - Client-side joins for MongoDB documents.
    """
    from docjoin.config import load_config
    from docjoin.errors import ConfigurationError
    from docjoin.utils import setup_logging

    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ConfigurationError) as e:
        # Commands that need the config report the error themselves
        ctx.obj["config_error"] = str(e)
        return

    ctx.obj["config"] = config
    setup_logging(
        log_level=log_level or config.logging.level,
        log_format=config.logging.format,
        log_file=Path(config.logging.file).expanduser() if config.logging.file else None,
        console_output=config.logging.console,
    )


@main.command()
@click.pass_context
def validate(ctx):
    """Validate config.yaml and show the normalized joins."""
    config = _require_config(ctx)

    click.echo(f"Config: {config.config_path}")
    click.echo(f"MongoDB: {json.dumps(config.mongo.redacted(), sort_keys=True)}")
    click.echo(f"Joins ({len(config.joins)}):")
    for index, spec in enumerate(config.joins, start=1):
        lookup = " (identifier lookup)" if spec.is_identifier_lookup else ""
        click.echo(
            f"  {index}. {spec.source_field} -> "
            f"{spec.target_collection}.{spec.target_field} as {spec.result_field}{lookup}"
        )
    click.echo("✓ Configuration is valid")


@main.command()
@click.argument("collection")
@click.option("--query", "query_json", default="{}", help="JSON filter for the primary query")
@click.option(
    "--mode",
    type=click.Choice(["list", "next", "stream", "one"]),
    default="list", show_default=True,
    help="Consumption pattern used to read the primary documents",
)
@click.option("--limit", type=int, default=0, help="Maximum primary documents (0 = no limit)")
@click.option(
    "--demo", "fixture",
    type=click.Path(exists=True, dir_okay=False, path_type=Path), default=None,
    help="Read from an in-memory store seeded from this YAML/JSON fixture",
)
@click.pass_context
def run(ctx, collection, query_json, mode, limit, fixture):
    """Query COLLECTION and print joined documents as JSON lines."""
    from pymongo.errors import PyMongoError

    from docjoin.errors import DocJoinError, JoinResolutionError
    from docjoin.session import JoinSession
    from docjoin.store import InMemoryDocumentStore, MongoDocumentStore, classify_store_error
    from docjoin.utils import dumps_document, load_fixture

    config = _require_config(ctx)

    try:
        query = json.loads(query_json)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--query")
    if not isinstance(query, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--query")

    try:
        if fixture is not None:
            store = InMemoryDocumentStore(load_fixture(fixture))
        else:
            store = MongoDocumentStore.from_config(config.mongo)
    except DocJoinError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)
    except PyMongoError as e:
        click.echo(f"✗ {classify_store_error(e, 'Cannot create MongoDB client')}", err=True)
        sys.exit(1)

    session = JoinSession(store, config.joins)
    logger.info(f"Reading '{collection}' ({mode}) with {len(config.joins)} join(s)")
    emitted = 0

    def emit(document):
        nonlocal emitted
        click.echo(dumps_document(document))
        emitted += 1

    try:
        primary = store.get_collection(collection)
        if mode == "one":
            document = session.find_one(primary, query)
            if document is not None:
                emit(document)
        else:
            cursor = primary.find(query)
            if limit:
                cursor = cursor.limit(limit)

            if mode == "list":
                for document in session.to_list(cursor):
                    emit(document)
            elif mode == "next":
                for document in session.wrap_scalar(cursor):
                    emit(document)
            else:
                errors = []
                stream = session.stream(cursor)
                stream.on("data", emit).on("error", errors.append)
                stream.run()
                if errors:
                    raise errors[0]
    except JoinResolutionError as e:
        partial = e.partial if isinstance(e.partial, list) else [e.partial]
        for document in partial:
            if document is not None:
                emit(document)
        click.echo(f"✗ Join failed after {emitted} document(s): {e}", err=True)
        sys.exit(1)
    except PyMongoError as e:
        # Driver errors from the primary cursor itself
        error = classify_store_error(e, f"Reading '{collection}' failed")
        click.echo(f"✗ {error}", err=True)
        sys.exit(1)
    except DocJoinError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)
    finally:
        store.close()

    click.echo(f"✓ {emitted} document(s) joined", err=True)


if __name__ == "__main__":
    main()

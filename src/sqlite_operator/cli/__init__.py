import sys
from pathlib import Path
from typing import Optional

import typer
import yaml
from typing_extensions import Annotated

from dotenv import load_dotenv, find_dotenv

from sqlite_operator.exceptions import PreconditionError
from sqlite_operator.models.database import KIND

load_dotenv(find_dotenv())

app = typer.Typer(
    help="SQLite Operator: run SQLite databases with Litestream on Kubernetes",
    add_completion=False,
)

DEFAULT_NAMESPACE = "default"


@app.command("run")
def run_operator(
    namespace: Annotated[
        Optional[str],
        typer.Option("-n", "--namespace", help="Only watch this namespace"),
    ] = None,
):
    """Run the Kubernetes operator (connects to cluster)."""
    from sqlite_operator.main import main

    main(namespace=namespace)


def render_manifest(document):
    """Build the owned objects for one SqliteDatabase manifest."""
    from sqlite_operator.services.defaults import apply_defaults, parse_spec
    from sqlite_operator.services.reconciler import desired_objects

    metadata = document.get("metadata") or {}
    name = metadata.get("name")
    if not name:
        raise PreconditionError("SqliteDatabase manifest has no metadata.name")
    namespace = metadata.get("namespace", DEFAULT_NAMESPACE)

    spec = apply_defaults(parse_spec(document.get("spec")))
    return list(desired_objects(name, namespace, spec))


@app.command("render")
def render(
    manifest: Annotated[
        Path, typer.Argument(help="YAML file with one or more SqliteDatabase resources")
    ],
):
    """Print the objects the operator would create, without a cluster."""
    try:
        documents = [
            doc
            for doc in yaml.safe_load_all(manifest.read_text())
            if doc and doc.get("kind") == KIND
        ]
    except (OSError, yaml.YAMLError) as e:
        typer.echo(f"Failed to read {manifest}: {e}", err=True)
        raise typer.Exit(1)

    if not documents:
        typer.echo(f"No {KIND} resources found in {manifest}", err=True)
        raise typer.Exit(1)

    objects = []
    for document in documents:
        try:
            objects.extend(render_manifest(document))
        except PreconditionError as e:
            typer.echo(f"Failed to render {KIND}: {e}", err=True)
            raise typer.Exit(1)

    yaml.safe_dump_all(objects, sys.stdout, default_flow_style=False, sort_keys=False)

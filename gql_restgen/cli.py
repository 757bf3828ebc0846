"""Command-line interface for gql-restgen."""

import json
import logging
from pathlib import Path

import click

from .core.config import ServiceConfig, load_resource_specs
from .core.http_store import HttpResourceStore
from .core.server import create_graphql_service, get_graphql_schema_sdl
from .core.store import InMemoryResourceStore


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def load_records(data_path: Path) -> dict[str, list[dict]]:
    """Read ``{"<resource>": [records...]}`` for the in-memory store."""
    with open(data_path) as f:
        records = json.load(f)
    if not isinstance(records, dict):
        raise click.BadParameter("expected an object mapping resource names to record lists", param_hint="--data")
    return records


@click.group()
@click.version_option(package_name="gql-restgen")
def main():
    """Read-only GraphQL API over REST resource schemas.

    Compile resource schemas to GraphQL SDL and run queries against them.
    """
    pass


@main.command()
@click.option(
    "--specs",
    "-s",
    required=True,
    envvar="GQL_RESTGEN_SPECS",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with the resource specs.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Write the SDL to this file instead of stdout.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def sdl(specs: str, output: str | None, verbose: bool):
    """Print the GraphQL schema compiled from resource specs.

    Examples:

        gql-restgen sdl --specs ./resources.json

        gql-restgen sdl -s ./resources.json -o ./schema.graphql
    """
    configure_logging(verbose)
    resource_specs = load_resource_specs(specs)
    if verbose:
        click.echo(f"Resources: {len(resource_specs)}", err=True)

    schema_sdl = get_graphql_schema_sdl(resource_specs)

    if output is None:
        click.echo(schema_sdl)
        return

    output_path = Path(output).resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(schema_sdl + "\n")
    click.echo(f"Done! Wrote schema to {output_path}")


@main.command()
@click.option(
    "--specs",
    "-s",
    required=True,
    envvar="GQL_RESTGEN_SPECS",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with the resource specs.",
)
@click.option(
    "--data",
    "-d",
    envvar="GQL_RESTGEN_DATA",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with records per resource (in-memory store).",
)
@click.option(
    "--store-url",
    envvar="GQL_RESTGEN_STORE_URL",
    help="Base URL of the REST API to query instead of --data.",
)
@click.option(
    "--query",
    "-q",
    "query_text",
    required=True,
    help="GraphQL query document.",
)
@click.option(
    "--variables",
    help="Query variables as a JSON object.",
)
@click.option(
    "--no-introspection",
    is_flag=True,
    envvar="GQL_RESTGEN_NO_INTROSPECTION",
    help="Reject introspection queries.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
def query(
    specs: str,
    data: str | None,
    store_url: str | None,
    query_text: str,
    variables: str | None,
    no_introspection: bool,
    verbose: bool,
):
    """Execute one GraphQL query and print the JSON response.

    Examples:

        gql-restgen query -s ./resources.json -d ./records.json -q '{ persons { total } }'

        gql-restgen query -s ./resources.json --store-url http://localhost:1080 \\
            -q 'query($id: ID!) { person(id: $id) { id } }' --variables '{"id": "p-1"}'
    """
    configure_logging(verbose)
    if (data is None) == (store_url is None):
        raise click.UsageError("Provide exactly one of --data or --store-url.")

    parsed_variables = None
    if variables:
        try:
            parsed_variables = json.loads(variables)
        except json.JSONDecodeError as e:
            raise click.BadParameter(str(e), param_hint="--variables") from e

    resource_specs = load_resource_specs(specs)
    config = ServiceConfig(introspection=not no_introspection)

    if data is not None:
        store = InMemoryResourceStore(load_records(Path(data)))
        response = _run(resource_specs, store, config, query_text, parsed_variables)
    else:
        with HttpResourceStore(store_url) as store:
            response = _run(resource_specs, store, config, query_text, parsed_variables)

    click.echo(json.dumps(response, indent=2))
    if response.get("errors") and response.get("data") is None:
        raise SystemExit(1)


def _run(resource_specs, store, config, query_text, variables):
    service = create_graphql_service(resource_specs, store, config)
    return service.handle({"query": query_text, "variables": variables})


if __name__ == "__main__":
    main()

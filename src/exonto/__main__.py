import logging
import os

import click
from dotenv import load_dotenv
from rdflib import Graph
from rdflib.exceptions import ParserError
from rdflib.plugin import PluginException

from exonto import iri as IRI
from exonto.analyzer import JsonAstParser, ProjectAnalyzer
from exonto.config import VALID_OUTPUT_FORMATS, Config
from exonto.errors import ExontoError, ParseError
from exonto.shacl import run, to_turtle

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


@click.group()
def cli():
    """Exonto - Elixir code ontology CLI"""
    # Load .env from current working directory
    load_dotenv(os.path.join(os.getcwd(), ".env"))


@cli.command()
@click.argument("path", type=click.Path(exists=True))
@click.option("--output", "-o", default=None, help="Write the graph to this file instead of stdout")
@click.option("--format", "output_format", type=click.Choice(VALID_OUTPUT_FORMATS), default=None, help="Serialization format")
@click.option("--base-iri", default=None, help="Base IRI for generated resources")
@click.option("--fail-fast", is_flag=True, help="Stop at the first file that fails to parse")
def analyze(path, output, output_format, base_iri, fail_fast):
    """Analyze a Mix project into an RDF graph."""
    try:
        config = Config.from_env().merge(base_iri=base_iri, output_format=output_format).validate_or_raise()
    except ExontoError as e:
        click.echo(f"Error: {e}", err=True)
        exit(1)

    analyzer = ProjectAnalyzer(JsonAstParser(), config)
    try:
        result = analyzer.analyze(path, continue_on_error=not fail_fast)
    except (ParseError, FileNotFoundError) as e:
        click.echo(f"Analysis failed: {e}", err=True)
        exit(1)

    for file_path, error in result.errors:
        click.echo(f"Failed: {file_path}: {error}", err=True)

    serialized = result.graph.serialize(format=config.rdflib_format)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(serialized)
        click.echo(
            f"Wrote {len(result.graph)} triples from {result.metadata['analyzed']} files to {output}", err=True
        )
    else:
        click.echo(serialized)


@cli.command()
@click.argument("data", type=click.Path(exists=True, dir_okay=False))
@click.argument("shapes", type=click.Path(exists=True, dir_okay=False))
@click.option("--report", default=None, help="Write the sh:ValidationReport (Turtle) to this file")
def validate(data, shapes, report):
    """Validate a data graph against a shapes graph. Exits 1 when it does not conform."""
    try:
        data_graph = Graph().parse(data)
        shapes_graph = Graph().parse(shapes)
    except (SyntaxError, ValueError, ParserError, PluginException) as e:
        click.echo(f"Validation failed: cannot read graph: {e}", err=True)
        exit(1)

    try:
        outcome = run(data_graph, shapes_graph)
    except ExontoError as e:
        click.echo(f"Validation failed: {e}", err=True)
        exit(1)

    for result in outcome.results:
        click.echo(f"[{result.severity.value}] {result.focus_node} {result.path or ''}: {result.message}")
    for error in outcome.errors:
        click.echo(f"[error] {error}", err=True)

    if report:
        with open(report, "w", encoding="utf-8") as f:
            f.write(to_turtle(outcome))

    click.echo(f"Conforms: {outcome.conforms} ({len(outcome.results)} results)")
    if not outcome.conforms:
        exit(1)


@cli.group()
def iri():
    """IRI utilities."""
    pass


@iri.command("parse")
@click.argument("value")
def parse_iri(value):
    """Print the components of a generated IRI."""
    try:
        parsed = IRI.parse(value)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        exit(1)

    for key, component in parsed.items():
        click.echo(f"{key}: {component}")


if __name__ == "__main__":
    cli()

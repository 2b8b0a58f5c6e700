"""CLI entry point — click group for listing cards and running saved pipelines."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from card_pipeline.core.config import ConfigManager
from card_pipeline.core.datatypes import Card, ExecutionResult
from card_pipeline.core.definitions import DefinitionCatalog
from card_pipeline.core.exceptions import CardPipelineError
from card_pipeline.core.persistence import load_pipeline, result_to_dict, save_pipeline
from card_pipeline.core.scheduler import schedule

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _load_catalog(config: ConfigManager) -> DefinitionCatalog:
    """Return the definitions named by the ``definitions`` config key, or the built-ins."""
    path = config.get("definitions")
    if path:
        return DefinitionCatalog.from_file(Path(path).expanduser())
    return DefinitionCatalog.builtin()


@click.group()
@click.version_option(package_name="card-pipeline")
@click.option("-v", "--verbose", count=True, help="Increase log output (-v info, -vv debug).")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Configuration directory (default: ~/.config/card-pipeline).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int, config_dir: Path | None) -> None:
    """Card Pipeline — build and run sample-data card graphs."""
    config = ConfigManager(config_dir=config_dir)
    try:
        config.load()
    except CardPipelineError as exc:
        raise click.ClickException(str(exc)) from exc

    if verbose:
        level = logging.DEBUG if verbose > 1 else logging.INFO
    else:
        level = getattr(logging, str(config.get("log_level", default="WARNING")).upper(), logging.WARNING)
    logging.basicConfig(level=level, format=_LOG_FORMAT)

    ctx.obj = config


@cli.command(name="cards")
@click.pass_obj
def cards_cmd(config: ConfigManager) -> None:
    """List the available card definitions by category."""
    try:
        catalog = _load_catalog(config)
    except CardPipelineError as exc:
        raise click.ClickException(str(exc)) from exc

    for category, definitions in catalog.by_category().items():
        click.echo(f"{category}:")
        for definition in definitions:
            click.echo(f"  {definition.id:<20} {definition.name}  [{definition.executor}]")


@cli.command(name="order")
@click.argument("pipeline_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def order_cmd(pipeline_file: Path) -> None:
    """Print the order in which the cards of PIPELINE_FILE would run."""
    try:
        pipeline = load_pipeline(pipeline_file)
        order = schedule(pipeline.graph())
    except CardPipelineError as exc:
        raise click.ClickException(str(exc)) from exc

    for position, card in enumerate(order, start=1):
        click.echo(f"{position:3d}. {card.name} ({card.id})")


@cli.command(name="run")
@click.argument("pipeline_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, default=False, help="Print results as JSON.")
@click.option("-s", "--seed", type=int, default=None, help="Seed for generated data (overrides config).")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Save the pipeline with output values filled in.",
)
@click.pass_obj
def run_cmd(config: ConfigManager, pipeline_file: Path, as_json: bool, seed: int | None, output_path: Path | None) -> None:
    """Execute PIPELINE_FILE and report each card's outcome."""
    from card_pipeline.core.engine import PipelineEngine
    from card_pipeline.core.events import CARD_FAILED, CARD_FINISHED, EventBus
    from card_pipeline.core.registry import ExecutorRegistry
    from card_pipeline.executors.generators import logic as generators

    try:
        pipeline = load_pipeline(pipeline_file)
        catalog = _load_catalog(config)
    except CardPipelineError as exc:
        raise click.ClickException(str(exc)) from exc

    seed = seed if seed is not None else config.get("seed")
    if seed is not None:
        generators.seed(int(seed))

    bus = EventBus()
    if not as_json:

        def report(*, card: Card, result: ExecutionResult, index: int, total: int) -> None:
            status = "ok" if result.ok else f"error: {result.error}"
            click.echo(f"  [{index + 1:3d}/{total:3d}] {card.name}: {status} ({result.execution_time:.1f} ms)")

        bus.subscribe(CARD_FINISHED, report)
        bus.subscribe(CARD_FAILED, report)

    engine = PipelineEngine(catalog, ExecutorRegistry.default(), event_bus=bus, config=config)
    execution = engine.run(pipeline)
    if execution.status == "error":
        raise click.ClickException(execution.error or "Pipeline run failed")

    if output_path is not None:
        pipeline.apply_results(execution.results)
        save_pipeline(pipeline, output_path)

    if as_json:
        click.echo(json.dumps([result_to_dict(r) for r in execution.results], indent=2, default=str))
        return

    failed = len(execution.failed_results)
    click.echo(f"Ran {len(execution.results)} cards ({failed} failed)")


@cli.command(name="demo")
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("-n", "--count", type=int, default=10, show_default=True, help="Numbers to generate.")
@click.option("-t", "--threshold", type=int, default=50, show_default=True, help="Keep numbers greater than this.")
@click.pass_obj
def demo_cmd(config: ConfigManager, output_path: Path, count: int, threshold: int) -> None:
    """Write a Number Generator -> Filter pipeline to OUTPUT_PATH."""
    from card_pipeline.core.datatypes import Position
    from card_pipeline.core.pipeline import Pipeline

    try:
        catalog = _load_catalog(config)
        pipeline = Pipeline(name="Demo Pipeline", description="Random numbers filtered by a threshold")
        generator = pipeline.add_card(catalog.create_card("number-generator", Position(x=50, y=80)))
        number_filter = pipeline.add_card(catalog.create_card("filter", Position(x=350, y=80)))
        pipeline.set_property(generator.id, "count", count)
        pipeline.set_property(number_filter.id, "field", "value")
        pipeline.set_property(number_filter.id, "operator", "greater")
        pipeline.set_property(number_filter.id, "value", str(threshold))
        pipeline.connect_by_name(generator, "numbers", number_filter, "array")
    except CardPipelineError as exc:
        raise click.ClickException(str(exc)) from exc

    save_pipeline(pipeline, output_path)
    click.echo(f"Wrote demo pipeline with {len(pipeline.cards)} cards to {output_path}")

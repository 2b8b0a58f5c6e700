"""PipelineEngine — schedules cards, feeds them upstream data and collects results."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from card_pipeline.core.config import ConfigManager
from card_pipeline.core.datatypes import Card, CardDefinition, Connection, ExecutionResult, PipelineExecution
from card_pipeline.core.events import (
    CARD_FAILED,
    CARD_FINISHED,
    CARD_STARTED,
    RUN_FINISHED,
    RUN_STARTED,
    EventBus,
)
from card_pipeline.core.exceptions import (
    CardExecutionError,
    CircularDependencyError,
    DefinitionNotFoundError,
    ExecutorNotFoundError,
    ExecutorRuntimeError,
)
from card_pipeline.core.graph import GraphModel
from card_pipeline.core.pipeline import Pipeline
from card_pipeline.core.registry import ExecutorFunction, ExecutorRegistry
from card_pipeline.core.resolver import resolve_inputs
from card_pipeline.core.scheduler import schedule
from card_pipeline.core.values import Outputs, normalize_outputs

logger = logging.getLogger(__name__)


class PipelineEngine:
    """Runs a card graph sequentially in topological order.

    Each card's inputs are resolved from the normalized outputs of cards
    that already ran.  Failures while running a card are recorded on that
    card's result and the run moves on; only a dependency cycle aborts the
    whole run, before any card executes.

    Args:
        definitions: ``definition id → CardDefinition`` lookup.
        registry: Executor functions by name.
        event_bus: Receives per-card progress events.
        config: Supplies per-executor property defaults.
    """

    def __init__(
        self,
        definitions: Mapping[str, CardDefinition],
        registry: ExecutorRegistry,
        *,
        event_bus: EventBus | None = None,
        config: ConfigManager | None = None,
    ) -> None:
        self.definitions = definitions
        self.registry = registry
        self.event_bus = event_bus or EventBus()
        self.config = config

    def execute(self, cards: Iterable[Card], connections: Iterable[Connection]) -> list[ExecutionResult]:
        """Execute every card once and return one result per card.

        Args:
            cards: Cards in caller order (the tie-break among independent cards).
            connections: Data-flow connections.

        Returns:
            Results in execution order.

        Raises:
            CircularDependencyError: If the connections form a cycle.
        """
        graph = GraphModel(cards, connections)
        for connection in graph.dangling_connections():
            logger.warning("Connection %s references a missing card or port and is ignored", connection.id)

        order = schedule(graph)
        total = len(order)
        self.event_bus.emit(RUN_STARTED, total=total)

        staged: dict[str, Outputs] = {}
        results: list[ExecutionResult] = []
        for index, card in enumerate(order):
            self.event_bus.emit(CARD_STARTED, card=card, index=index, total=total)
            result = self._execute_card(card, graph, staged)
            results.append(result)
            self.event_bus.emit(
                CARD_FINISHED if result.ok else CARD_FAILED,
                card=card,
                result=result,
                index=index,
                total=total,
            )

        self.event_bus.emit(RUN_FINISHED, results=results)
        return results

    def run(self, pipeline: Pipeline) -> PipelineExecution:
        """Execute *pipeline* and wrap the outcome in a ``PipelineExecution``.

        A dependency cycle sets ``status`` to ``"error"`` with no results
        instead of raising.

        Args:
            pipeline: The pipeline to run.

        Returns:
            The run record with timestamps and results.
        """
        execution = PipelineExecution(pipeline_id=pipeline.id, start_time=datetime.now(timezone.utc))
        logger.info("Running pipeline '%s' (%d cards)", pipeline.name, len(pipeline.cards))
        try:
            execution.results = self.execute(pipeline.cards, pipeline.connections)
        except CircularDependencyError as exc:
            logger.error("Pipeline '%s' aborted: %s", pipeline.name, exc)
            execution.status = "error"
            execution.error = str(exc)
        else:
            execution.status = "completed"
        finally:
            execution.end_time = datetime.now(timezone.utc)
        return execution

    def _execute_card(self, card: Card, graph: GraphModel, staged: dict[str, Outputs]) -> ExecutionResult:
        start = time.perf_counter()
        try:
            inputs = resolve_inputs(card, graph, staged)
            definition = self._definition_for(card)
            func = self._executor_for(definition)
            properties = self._properties_for(card, definition)
            outputs = normalize_outputs(self._invoke(definition.executor, func, inputs, properties))
        except CardExecutionError as exc:
            elapsed = _elapsed_ms(start)
            logger.warning("Card '%s' (%s) failed after %.1f ms: %s", card.name, card.id, elapsed, exc)
            return ExecutionResult(card_id=card.id, outputs={}, error=str(exc), execution_time=elapsed)

        staged[card.id] = outputs
        elapsed = _elapsed_ms(start)
        logger.info("Card '%s' (%s) finished in %.1f ms", card.name, card.id, elapsed)
        return ExecutionResult(card_id=card.id, outputs=outputs, execution_time=elapsed)

    def _definition_for(self, card: Card) -> CardDefinition:
        definition = self.definitions.get(card.definition_id)
        if definition is None:
            msg = f"Card definition not found: {card.definition_id}"
            raise DefinitionNotFoundError(msg)
        return definition

    def _executor_for(self, definition: CardDefinition) -> ExecutorFunction:
        func = self.registry.get(definition.executor)
        if func is None:
            msg = f"Executor not found: {definition.executor}"
            raise ExecutorNotFoundError(msg)
        return func

    def _properties_for(self, card: Card, definition: CardDefinition) -> dict[str, Any]:
        properties: dict[str, Any] = {}
        if self.config is not None:
            properties.update(self.config.executor_defaults(definition.executor))
        properties.update(card.property_values())
        return properties

    @staticmethod
    def _invoke(
        name: str,
        func: ExecutorFunction,
        inputs: dict[str, Any],
        properties: dict[str, Any],
    ) -> Mapping[str, Any]:
        try:
            raw = func(inputs, properties)
        except Exception as exc:
            raise ExecutorRuntimeError(str(exc) or type(exc).__name__) from exc
        if not isinstance(raw, Mapping):
            msg = f"Executor '{name}' returned {type(raw).__name__}, expected a mapping of outputs"
            raise ExecutorRuntimeError(msg)
        return raw


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0

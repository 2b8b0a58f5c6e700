"""Scheduler — depth-first topological ordering with cycle detection."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Iterator

from card_pipeline.core.datatypes import Card, Connection
from card_pipeline.core.exceptions import CircularDependencyError
from card_pipeline.core.graph import GraphModel

logger = logging.getLogger(__name__)


class _Mark(enum.Enum):
    IN_PROGRESS = "in_progress"
    DONE = "done"


def schedule(graph: GraphModel) -> list[Card]:
    """Order the cards of *graph* so every card follows the cards feeding it.

    Cards are visited in input order; each visit first descends into the
    card's dependencies and appends the card once they are done.  The walk
    keeps its own stack of ``(card id, pending dependencies)`` frames, so
    chain depth is not bounded by the interpreter's recursion limit.

    Args:
        graph: Indexed cards and connections.

    Returns:
        Every card exactly once, sources before targets for each connection.

    Raises:
        CircularDependencyError: If a card is reached again while still in
            progress.  No partial ordering is returned.
    """
    marks: dict[str, _Mark] = {}
    order: list[Card] = []

    for root in graph.cards:
        if root.id in marks:
            continue

        marks[root.id] = _Mark.IN_PROGRESS
        path: list[str] = [root.id]
        pending: list[Iterator[str]] = [iter(graph.dependencies(root.id))]
        while pending:
            dependency = next(pending[-1], None)
            if dependency is None:
                pending.pop()
                card_id = path.pop()
                marks[card_id] = _Mark.DONE
                card = graph.card(card_id)
                if card is not None:
                    order.append(card)
                continue

            mark = marks.get(dependency)
            if mark is _Mark.DONE:
                continue
            if mark is _Mark.IN_PROGRESS:
                cycle = path[path.index(dependency) :] + [dependency]
                raise CircularDependencyError(cycle)

            marks[dependency] = _Mark.IN_PROGRESS
            path.append(dependency)
            pending.append(iter(graph.dependencies(dependency)))

    logger.debug("Execution order: %s", [card.id for card in order])
    return order


def execution_order(cards: Iterable[Card], connections: Iterable[Connection]) -> list[Card]:
    """Convenience wrapper building a ``GraphModel`` and calling :func:`schedule`.

    Args:
        cards: Cards in caller order.
        connections: Data-flow connections between them.

    Returns:
        The scheduled card sequence.
    """
    return schedule(GraphModel(cards, connections))

"""Exception hierarchy for the card-pipeline framework."""


class CardPipelineError(Exception):
    """Base exception for all card-pipeline errors."""


class ValidationError(CardPipelineError):
    """Raised when a graph edit or a property value is invalid."""


class RegistrationError(CardPipelineError):
    """Raised when an executor cannot be registered."""


class PersistenceError(CardPipelineError):
    """Raised when a pipeline or definition file cannot be read or written."""


class PipelineError(CardPipelineError):
    """Raised when a pipeline cannot be executed as a whole."""


class CircularDependencyError(PipelineError):
    """Raised by the scheduler when the connections form a cycle.

    Args:
        cycle: Card ids on the detected cycle, in traversal order.
    """

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(f"Circular dependency detected: {' -> '.join(cycle)}")


class CardExecutionError(CardPipelineError):
    """Base for failures isolated to a single card's result entry."""


class DefinitionNotFoundError(CardExecutionError):
    """Raised when a card references an unknown definition id."""


class ExecutorNotFoundError(CardExecutionError):
    """Raised when a definition names an executor that is not registered."""


class ExecutorRuntimeError(CardExecutionError):
    """Raised when an executor function fails or returns an invalid value."""

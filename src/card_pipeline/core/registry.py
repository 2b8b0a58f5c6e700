"""ExecutorRegistry — explicit mapping from executor name to computation function."""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from collections.abc import Callable, Mapping
from typing import Any, ClassVar, TypeVar

from card_pipeline.core.exceptions import RegistrationError

logger = logging.getLogger(__name__)

# Every executor shares this signature: (inputs, properties) -> outputs.
ExecutorFunction = Callable[[dict[str, Any], dict[str, Any]], Mapping[str, Any]]

_F = TypeVar("_F", bound=Callable[..., Any])

_EXECUTOR_ATTR = "__executor_name__"


def executor(name: str) -> Callable[[_F], _F]:
    """Mark a function for discovery under the registry name *name*.

    Args:
        name: The name card definitions use in their ``executor`` field.

    Returns:
        A decorator returning the function unchanged apart from the marker.
    """

    def decorate(func: _F) -> _F:
        setattr(func, _EXECUTOR_ATTR, name)
        return func

    return decorate


class ExecutorRegistry:
    """Maps executor names to functions, validating each at registration.

    ``ExecutorRegistry.default()`` returns a shared instance populated from
    the ``card_pipeline.executors.*`` packages; plain instances start empty
    and are meant for tests and embedding.

    Args:
        executors: Optional initial name → function mapping.
    """

    _default: ClassVar[ExecutorRegistry | None] = None

    def __init__(self, executors: Mapping[str, ExecutorFunction] | None = None) -> None:
        self._executors: dict[str, ExecutorFunction] = {}
        for name, func in (executors or {}).items():
            self.register(name, func)

    @classmethod
    def default(cls) -> ExecutorRegistry:
        """Return the shared registry, discovering built-in executors on first call."""
        if cls._default is None:
            registry = cls()
            registry.discover()
            cls._default = registry
        return cls._default

    @classmethod
    def reset(cls) -> None:
        """Drop the shared registry — intended for testing only."""
        cls._default = None

    def register(self, name: str, func: ExecutorFunction, *, replace: bool = False) -> None:
        """Add an executor under *name*.

        Args:
            name: Registry name.
            func: Callable accepting ``(inputs, properties)``.
            replace: Allow overwriting an existing registration.

        Raises:
            RegistrationError: If the name is empty or taken, or *func* is
                not callable with two positional arguments.
        """
        if not name:
            msg = "Executor name must be a non-empty string"
            raise RegistrationError(msg)
        if not callable(func):
            msg = f"Executor '{name}' is not callable"
            raise RegistrationError(msg)
        try:
            inspect.signature(func).bind({}, {})
        except TypeError as exc:
            msg = f"Executor '{name}' must accept (inputs, properties): {exc}"
            raise RegistrationError(msg) from exc
        except ValueError:
            logger.debug("No signature available for executor '%s'", name)
        if name in self._executors and not replace:
            msg = f"Executor '{name}' is already registered"
            raise RegistrationError(msg)

        self._executors[name] = func
        logger.info("Registered executor: %s", name)

    def discover(self, package: str = "card_pipeline.executors") -> None:
        """Scan ``<package>.*.logic`` modules and register marked functions.

        Args:
            package: Dotted name of the package holding executor sub-packages.
        """
        executors_package = importlib.import_module(package)

        for _importer, module_name, is_pkg in pkgutil.iter_modules(executors_package.__path__):
            if not is_pkg:
                continue
            try:
                logic_module = importlib.import_module(f"{package}.{module_name}.logic")
            except ImportError:
                logger.debug("Skipping %s - no logic.py found", module_name)
                continue

            for attr_name in dir(logic_module):
                attr = getattr(logic_module, attr_name)
                name = getattr(attr, _EXECUTOR_ATTR, None)
                if not callable(attr) or not isinstance(name, str):
                    continue
                if self._executors.get(name) is attr:
                    continue
                self.register(name, attr)

    def get(self, name: str) -> ExecutorFunction | None:
        """Look up an executor by name.

        Args:
            name: Registry name (e.g. ``"numberGenerator"``).

        Returns:
            The function, or ``None`` if not registered.
        """
        return self._executors.get(name)

    def names(self) -> list[str]:
        """Return registered executor names, sorted."""
        return sorted(self._executors)

    def __contains__(self, name: object) -> bool:
        return name in self._executors

    def __len__(self) -> int:
        return len(self._executors)

"""ConfigManager — global and per-executor settings backed by TOML files."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from card_pipeline.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_DIR = Path.home() / ".config" / "card-pipeline"


class ConfigManager:
    """Hierarchical configuration read from ``config_dir``.

    ``config.toml`` holds global keys (``seed``, ``definitions``,
    ``log_level``).  Files under ``executors/`` are named after an executor
    (``executors/numberGenerator.toml``) and hold property defaults applied
    to cards of that executor that do not set the property themselves.

    Args:
        config_dir: Root directory for configuration files.
                    Defaults to ``~/.config/card-pipeline/``.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        self._config_dir = config_dir or _DEFAULT_CONFIG_DIR
        self._global: dict[str, Any] = {}
        self._per_executor: dict[str, dict[str, Any]] = {}

    @property
    def config_dir(self) -> Path:
        """Return the configuration directory path."""
        return self._config_dir

    def load(self) -> None:
        """Load global and per-executor config; missing files are skipped.

        Raises:
            PersistenceError: If a present file is not valid TOML.
        """
        global_file = self._config_dir / "config.toml"
        if global_file.is_file():
            self._global = self._read_toml(global_file)
            logger.info("Loaded global config from %s", global_file)

        executors_dir = self._config_dir / "executors"
        if executors_dir.is_dir():
            for toml_file in sorted(executors_dir.glob("*.toml")):
                self._per_executor[toml_file.stem] = self._read_toml(toml_file)
                logger.info("Loaded defaults for executor '%s'", toml_file.stem)

    def get(self, key: str, *, executor: str | None = None, default: Any = None) -> Any:
        """Retrieve a value, checking the executor's table before the global one.

        Args:
            key: The configuration key.
            executor: Executor name whose settings take precedence.
            default: Fallback when the key is not found.

        Returns:
            The configuration value, or *default*.
        """
        if executor and executor in self._per_executor:
            value = self._per_executor[executor].get(key)
            if value is not None:
                return value
        return self._global.get(key, default)

    def executor_defaults(self, executor: str) -> dict[str, Any]:
        """Return a copy of the property defaults configured for *executor*."""
        return dict(self._per_executor.get(executor, {}))

    def set_global(self, key: str, value: Any) -> None:
        """Set a global value (in-memory only)."""
        self._global[key] = value

    def set_executor_default(self, executor: str, key: str, value: Any) -> None:
        """Set a property default for *executor* (in-memory only)."""
        self._per_executor.setdefault(executor, {})[key] = value

    @staticmethod
    def _read_toml(path: Path) -> dict[str, Any]:
        try:
            with path.open("rb") as fh:
                return tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Config file '{path}' is not valid TOML: {exc}"
            raise PersistenceError(msg) from exc

"""Preview executors — pass data through so a viewer can show it."""

from __future__ import annotations

from typing import Any

from card_pipeline.core.registry import executor


@executor("printArrayExecutor")
def print_array(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    """Forward the ``array`` input unchanged (empty list when absent)."""
    return {"printed": inputs.get("array") or []}


@executor("jsonPreviewExecutor")
def json_preview(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    """Forward the ``data`` input unchanged (empty object when absent)."""
    return {"passthrough": inputs.get("data") or {}}

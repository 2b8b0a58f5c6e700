"""Preview — pass-through executors feeding array and JSON viewers."""

from card_pipeline.executors.preview.logic import json_preview, print_array

__all__ = ["json_preview", "print_array"]

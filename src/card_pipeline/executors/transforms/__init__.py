"""Transforms — executors that filter, pluck, group and sort arrays."""

from card_pipeline.executors.transforms.logic import filter_array, transform_array

__all__ = ["filter_array", "transform_array"]

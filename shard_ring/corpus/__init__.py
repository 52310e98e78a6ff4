"""Key corpus and assignment artifacts for shard-ring."""

from .artifacts import (
    Assignment,
    ComparisonReport,
    assign_keys,
    build_assignments_document,
    compare_assignments,
    read_json,
    write_json,
)
from .keys import build_keys_document, generate_keys, load_keys

__all__ = [
    "Assignment",
    "ComparisonReport",
    "assign_keys",
    "build_assignments_document",
    "build_keys_document",
    "compare_assignments",
    "generate_keys",
    "load_keys",
    "read_json",
    "write_json",
]

"""Serialization module — convert plans to and from application record dicts."""

from ordering_engine.serialization.records import (
    plan_from_dicts,
    plan_from_json_string,
    plan_to_dicts,
    plan_to_json_string,
    record_from_dict,
    record_to_dict,
)

__all__ = [
    "plan_from_dicts",
    "plan_from_json_string",
    "plan_to_dicts",
    "plan_to_json_string",
    "record_from_dict",
    "record_to_dict",
]

"""Utility functions for file and path operations."""

from .file_utils import ensure_directory, get_timestamp, get_timestamp_ms, load_json, save_image_bytes, save_json

__all__ = [
    "ensure_directory",
    "get_timestamp",
    "get_timestamp_ms",
    "load_json",
    "save_image_bytes",
    "save_json",
]

"""Utility functions for pasetolite."""

from .datetime_utils import parse_iso_timestamp, utc_now_iso

__all__ = ["parse_iso_timestamp", "utc_now_iso"]

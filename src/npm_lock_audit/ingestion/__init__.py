"""Utilities for fetching threat intelligence feeds and building the reference dataset."""

from .datadog_feed import (
    DATADOG_FEED_URL,
    DATADOG_SOURCE_URL,
    DEFAULT_ATTACK_NAME,
    DataDogFeedAggregation,
    DataDogFeedError,
    aggregate_datadog_payload,
    build_dataset,
    fetch_datadog_feed,
    write_dataset,
)

__all__ = [
    "DATADOG_FEED_URL",
    "DATADOG_SOURCE_URL",
    "DEFAULT_ATTACK_NAME",
    "DataDogFeedAggregation",
    "DataDogFeedError",
    "aggregate_datadog_payload",
    "build_dataset",
    "fetch_datadog_feed",
    "write_dataset",
]

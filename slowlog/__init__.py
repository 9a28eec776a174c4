"""Indexing slow log: threshold classification of write latencies with live settings."""

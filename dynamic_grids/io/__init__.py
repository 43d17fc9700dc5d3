"""Persistence layer: Parquet schemas and path helpers."""

"""Bounded pool of HTTP workers for fetching files from Maven repositories."""

from fetcher.pool import FetchPool, Job, Result

__all__ = ["FetchPool", "Job", "Result"]

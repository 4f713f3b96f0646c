"""Concurrent recursive search for POM URLs."""

from finder.finder import Finder, FinderOptions, NodeState

__all__ = ["Finder", "FinderOptions", "NodeState"]

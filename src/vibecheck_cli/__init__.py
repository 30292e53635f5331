"""Vibecheck CLI - heuristic AI-authorship and effort report for GitHub repositories."""

__version__ = "0.3.0"

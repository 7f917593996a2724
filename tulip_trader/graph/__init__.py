"""LangGraph workflow for the daily market tick."""

from .workflow import create_day_graph

__all__ = [
    "create_day_graph"
]

"""
PhaseBoard - Project and phase tracking dashboard backend.

REST API over users, projects and phases, with server-side timeline layout,
filtering and dashboard statistics.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]

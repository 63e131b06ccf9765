"""PhaseBoard service layer: storage, hydration and stats."""

from .stats import compute_stats
from .storage import PhaseBoardStorage

__all__ = ["PhaseBoardStorage", "compute_stats"]

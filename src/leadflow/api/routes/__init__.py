"""Route group exports."""

from . import agents, distributions, health, uploads

__all__ = ["agents", "distributions", "health", "uploads"]

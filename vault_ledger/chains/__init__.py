"""Host chain implementations."""
from .simulated import SimulatedChain

__all__ = ["SimulatedChain"]

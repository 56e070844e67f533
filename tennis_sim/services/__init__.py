"""
Service layer: builds the simulation pipeline from run configuration.
"""
from .simulation_service import build_sink, run_simulation

__all__ = [
    "build_sink",
    "run_simulation",
]

"""Seat solving adapters."""

from .tiered_solver import TieredSeatSolver

__all__ = ["TieredSeatSolver"]

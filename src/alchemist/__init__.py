"""Alchemist: validation and capacity-feasibility checks for client/worker/task datasets."""

__version__ = "0.1.0"

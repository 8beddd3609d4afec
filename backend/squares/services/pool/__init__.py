"""Pool domain services: squares, axes, lifecycle and winners.

This package contains pure(ish) domain logic that should be imported by
HTTP routes and socket handlers, keeping transport concerns separated
from the grid rules and scoring.
"""

"""Core application for the medical planning backend.

This package contains the reference data and planning models, the grid
aggregation services, and the DRF views and routes used by the
front-end planning panel.
"""

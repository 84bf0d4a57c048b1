"""Core backend infrastructure for the authority gate service.

This package contains configuration, logging, database, and dependency helpers
used by the FastAPI application entrypoint and the readiness batch runner.
"""

"""Batch run modes invoked by the CLI, the server entrypoint and the API."""

"""Logging and metrics for RevScope."""

"""Adapters - configuration, HTTP API and the scheduler timer loop."""

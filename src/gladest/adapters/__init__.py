"""Integrations with third-party renderers and document formats."""

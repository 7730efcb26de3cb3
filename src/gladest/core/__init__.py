"""Core pipeline: scanning, engine caching, parallel rendering and reporting."""

"""HTTP API for cache inspection and domain reads."""

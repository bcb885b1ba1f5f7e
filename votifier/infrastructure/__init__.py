"""Infrastructure layer for Votifier: crypto, listener and logging adapters."""

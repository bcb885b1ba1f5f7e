"""Infrastructure adapters for Votifier."""

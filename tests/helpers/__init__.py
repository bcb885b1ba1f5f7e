"""Test helpers for Votifier."""

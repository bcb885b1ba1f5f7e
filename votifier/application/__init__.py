"""Application layer for Votifier: ports, result DTOs and services."""

"""Service layer for lineflow."""

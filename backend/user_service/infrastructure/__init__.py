"""Infrastructure - database sessions, logging setup, credential primitives."""

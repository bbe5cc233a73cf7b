"""Developer helpers (debug switches, logging setup)."""

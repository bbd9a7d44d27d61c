"""Runtime profile definitions and config validation."""

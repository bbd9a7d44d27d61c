"""Static forbidden-pattern scanner."""

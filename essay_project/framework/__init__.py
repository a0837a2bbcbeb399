"""Project-specific framework utilities (configuration parsing)."""

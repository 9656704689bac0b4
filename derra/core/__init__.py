"""Core application utilities (config, errors, auth, dependencies)."""

"""Core infrastructure: configuration loading and structured logging."""

"""Core settings and exception types."""

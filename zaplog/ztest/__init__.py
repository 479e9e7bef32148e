"""Low-level helpers for testing log output: a mock clock, scaled timeouts and writer doubles."""

__all__ = ["clock", "timeout", "writer"]
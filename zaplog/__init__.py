"""Building blocks for leveled, structured logging: levels, a level endpoint,
sinks and writers, stack traces, small utilities and test helpers."""

__version__ = "0.1.0"

__all__ = [
    "color",
    "exit",
    "http_handler",
    "level",
    "pool",
    "readme",
    "sink",
    "stacktrace",
    "timeutil",
    "writer",
    "ztest",
]
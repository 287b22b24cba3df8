"""TaskFlow reminder service: hourly scan of due tasks, one email per due date."""

__version__ = "0.1.0"

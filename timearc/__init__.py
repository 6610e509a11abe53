"""Time Arc - per-task stopwatch with daily totals and an activity calendar."""

__version__ = "0.1.0"

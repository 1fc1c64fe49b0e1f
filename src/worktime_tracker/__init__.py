"""Work-time tracker: timed sessions per tracker and work debt/advance statistics."""

__version__ = "1.0.0"

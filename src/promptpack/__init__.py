"""promptpack - budgeted prompt context assembly for source projects."""

__version__ = "0.1.0"

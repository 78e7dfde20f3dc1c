"""perfectscrabble — perfect Scrabble game viewer and recorder."""

__version__ = "0.1.0"

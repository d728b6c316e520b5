"""Box to Box: football trivia grid backend."""

__version__ = "1.0.0"

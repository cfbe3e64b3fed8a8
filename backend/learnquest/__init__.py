"""LearnQuest - learning session engine for the kids' quest app."""

__version__ = "0.1.0"

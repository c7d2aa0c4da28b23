"""Career Compass: interest-quiz career recommendations."""

__version__ = "0.1.0"

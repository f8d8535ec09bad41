"""codepaint: paint source lines with coverage and test-failure evidence."""

__version__ = "0.1.0"

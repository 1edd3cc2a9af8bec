"""repo-health: GitHub repository health reports."""

__version__ = "0.1.0"

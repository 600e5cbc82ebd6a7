"""Version information for pocketmcp."""

__version__ = "1.0.0"

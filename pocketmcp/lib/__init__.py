"""Shared library code for pocketmcp."""

"""Model Context Protocol server implementation."""

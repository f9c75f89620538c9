"""Command-line entry point for the Cap desktop bootstrap."""

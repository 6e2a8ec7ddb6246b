"""Command-line entry point for sharder."""

"""Command-line client for noteseek."""

"""Command-line interface for aumos-compliance."""

"""Command-line interface for variant-vault."""

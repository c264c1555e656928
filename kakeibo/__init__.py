"""Command-line entry point for the household ledger."""

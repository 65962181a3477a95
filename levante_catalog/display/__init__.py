"""Console and logging output for the CLI."""

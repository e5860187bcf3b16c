"""Console entry point for the expense dashboard."""

"""HTTP interface for the expense dashboard."""

"""Console entry points and click command groups."""

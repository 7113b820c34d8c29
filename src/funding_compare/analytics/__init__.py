"""Summary analytics over comparison results."""

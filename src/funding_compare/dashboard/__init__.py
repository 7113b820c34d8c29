"""JSON dashboard over the latest refresh report."""

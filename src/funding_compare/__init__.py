"""Cross-exchange perpetual funding rate comparison."""

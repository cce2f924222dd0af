"""Chat command tools."""

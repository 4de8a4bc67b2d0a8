"""Species and move data loading."""

"""Order workflow engine."""

"""Media registration and reference resolution."""

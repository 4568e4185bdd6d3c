"""Content-tree reconstruction services."""

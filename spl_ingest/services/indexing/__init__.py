"""Cross-document index resolution services."""

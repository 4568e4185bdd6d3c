"""SPL drug-label ingestion: content-tree reconstruction and index resolution."""

__version__ = "0.1.0"

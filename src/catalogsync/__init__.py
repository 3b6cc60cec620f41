"""catalogsync: submit uncategorized inventory records for classification."""

__version__ = "0.3.0"

"""Evidence Management Engine: search, tagging, archival and bulk edits for performance evidence."""

__version__ = "0.1.0"

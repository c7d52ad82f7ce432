"""docindex-cli: validate parsed documentation records and build a site search index."""

__version__ = "0.1.0"

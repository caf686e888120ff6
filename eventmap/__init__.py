"""Event Map - geo-located event collections with ordered curation"""

__version__ = "1.0.0"

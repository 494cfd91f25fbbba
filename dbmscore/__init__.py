"""Storage core of a small table database: typed values, data files, sorted merging, framing and a query client."""

__version__ = "0.1.0"
"""Government immigration / labor news aggregation for manufacturers employing foreign workers."""

__version__ = "1.0.0"

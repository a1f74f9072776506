"""RevScope: cross-type revision history aggregation and field-level diffing."""

__version__ = "0.1.0"

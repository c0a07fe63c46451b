"""typegraph — schema-validated property graph over a relational store."""

__version__ = "0.1.0"

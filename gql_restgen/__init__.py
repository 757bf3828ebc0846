"""Read-only GraphQL APIs compiled from REST resource schemas."""

__version__ = "0.1.0"

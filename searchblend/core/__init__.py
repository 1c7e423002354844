"""Core layer: configuration, logging and the exception hierarchy."""

"""Core types, configuration and artifact loading."""

"""Configuration, identity, and shared helpers."""

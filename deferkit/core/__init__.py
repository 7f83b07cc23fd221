"""Configuration, errors and logging shared across deferkit."""

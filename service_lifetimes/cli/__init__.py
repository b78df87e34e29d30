"""Command line interface for SERVICE_LIFETIMES."""

"""Command-line interface for cadassist."""

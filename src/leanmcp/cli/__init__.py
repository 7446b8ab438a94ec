"""LeanMCP command-line interface."""

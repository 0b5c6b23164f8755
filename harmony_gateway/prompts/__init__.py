"""Prompt builders, output parsers and deterministic fallbacks."""

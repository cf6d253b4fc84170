"""Core runtime pieces: logging, configuration, errors, template loading."""

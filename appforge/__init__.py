"""Appforge - one-command Rails application scaffolding."""

__version__ = "0.1.0"

"""Conversational command-suggestion engine for ContactCMD."""

__version__ = "0.1.0"

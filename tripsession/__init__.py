"""Bounded conversational session store for a tool-calling chat model."""

__version__ = "0.1.0"

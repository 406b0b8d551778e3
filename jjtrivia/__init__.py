"""Trivia game player core: game file ingestion, validation and library management."""

__version__ = "0.1.0"

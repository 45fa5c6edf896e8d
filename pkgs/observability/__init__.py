"""Observability infrastructure for the engine: structured logging."""

from .logging import setup_logging

__all__ = ['setup_logging']

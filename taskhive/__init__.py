"""Periodic task scheduling with Redis-backed storage, retrying execution and execution logs."""

__version__ = "0.1.0"
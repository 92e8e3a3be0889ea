"""Skillbox - local-first, agent-agnostic skills manager."""

__version__ = "0.2.2"

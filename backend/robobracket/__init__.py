"""Bracket and qualifier scheduling engine for robotics tournaments."""

__version__ = "0.1.0"

# exam_logistics/__init__.py
"""Invigilation duty and exam seating allocation service."""

__version__ = "1.0.0"

# exam_logistics/services/data_retrieval/__init__.py

"""
Data retrieval services package.

Read-only loaders that snapshot rosters, rooms and exam slots into engine
records at the start of an allocation run.
"""

from .roster_data import RosterLoader

__all__ = [
    "RosterLoader",
]

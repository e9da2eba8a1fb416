"""
Adapters layer - In-memory collaborators loaded from fixture files.
"""

from .memory import FixtureCalendarGateway, InMemoryStore, build_fixture, load_fixture

__all__ = ["FixtureCalendarGateway", "InMemoryStore", "build_fixture", "load_fixture"]

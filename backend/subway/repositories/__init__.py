"""Persistence adapters for the topology engine."""

from subway.repositories.section_repository import SectionRepository

__all__ = ["SectionRepository"]

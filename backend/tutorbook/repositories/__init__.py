# backend/tutorbook/repositories/__init__.py
"""
Repository layer for the Tutorbook booking core.

Key Components:
- BaseRepository: generic CRUD helpers shared by all repositories
- RepositoryFactory: creates repository instances for services
- SqlAlchemyPersistenceGateway: the booking core's view of storage
"""

from .base_repository import BaseRepository
from .factory import RepositoryFactory

__all__ = ["BaseRepository", "RepositoryFactory"]

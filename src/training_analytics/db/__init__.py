"""Storage for analytics, load chain and breakthrough candidates."""

from .database import TrainingDatabase, get_default_db_path

__all__ = ["TrainingDatabase", "get_default_db_path"]

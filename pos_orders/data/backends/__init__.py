from .sqlite_backend import SqliteOrderStore

__all__ = ["SqliteOrderStore"]

from .db import init_db

__all__ = ["init_db"]

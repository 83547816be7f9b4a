from .service import ValueStore

__all__ = ["ValueStore"]

# fetchers/__init__.py
from . import chrome_store

__all__ = ["chrome_store"]

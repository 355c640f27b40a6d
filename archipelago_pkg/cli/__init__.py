from .app import _health_check
from .app import main_entry

__all__ = ["main_entry", "_health_check"]

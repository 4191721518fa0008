from .orchestrator import Orchestrator
from .registry import Registry

__all__ = ["Orchestrator", "Registry"]

"""hivoice - Hands-free voice control for a task list.

hivoice provides:
- Wake word listening ("hi voice") with bounded retries
- A slot-filling dialogue that builds a task and negotiates a reminder
- A persistent reminder scheduler with at-most-once delivery
- A single serialized speech output channel

Usage:
    python -m hivoice --config config/dev.yaml
    python -m hivoice --profile prod
"""

__version__ = "0.1.0"

from .config import HiVoiceConfig
from .config.loader import load_config
from .engine import VoiceEngine

__all__ = [
    "HiVoiceConfig",
    "VoiceEngine",
    "__version__",
    "load_config",
]

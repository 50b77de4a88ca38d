"""Speech synthesis capability for hivoice.

Provides platform-adaptive speech output:
- macOS: native `say` command
- Linux: `espeak` if installed
- Other: console printer fallback
"""

import logging
from typing import TYPE_CHECKING

from ..config.profiles import Platform, detect_platform
from .backend import SpeechBackend
from .command import CommandSpeechBackend
from .console import ConsoleSpeechBackend
from .mock import MockSpeechBackend

if TYPE_CHECKING:
    from ..clock import Clock
    from ..config import SpeechConfig

logger = logging.getLogger(__name__)


def create_speech_backend(
    clock: "Clock",
    config: "SpeechConfig | None" = None,
    use_mock: bool = False,
) -> SpeechBackend:
    """Create the appropriate speech backend for the current platform.

    Args:
        clock: Loop that receives completion callbacks
        config: Speech configuration (optional)
        use_mock: If True, force mock backend for testing

    Returns:
        SpeechBackend implementation. Never returns None; falls back to
        the console backend.
    """
    backend = config.backend if config is not None else "auto"
    voice = config.voice if config is not None else None

    if use_mock or backend == "mock":
        logger.info("Speech: Using MockSpeechBackend (requested)")
        return MockSpeechBackend(auto_complete=True)

    if backend == "console":
        logger.info("Speech: Using ConsoleSpeechBackend (requested)")
        return ConsoleSpeechBackend(clock)

    platform = detect_platform()
    logger.debug(f"Speech: Detected platform: {platform.name}")

    command = {Platform.MACOS: "say", Platform.LINUX: "espeak"}.get(platform)
    if backend in ("say", "espeak"):
        command = backend

    if command is not None:
        synth = CommandSpeechBackend(clock, command=command, voice=voice)
        if synth.is_available:
            logger.info(f"Speech: Using CommandSpeechBackend ({command})")
            return synth
        logger.warning(f"Speech: '{command}' command not available")

    logger.warning("Speech: Using ConsoleSpeechBackend (fallback)")
    return ConsoleSpeechBackend(clock)


__all__ = [
    "CommandSpeechBackend",
    "ConsoleSpeechBackend",
    "MockSpeechBackend",
    "SpeechBackend",
    "create_speech_backend",
]

"""Speech backend using the system speech command.

Uses `say` on macOS and `espeak` on Linux. Each utterance is a child
process; a waiter thread posts completion back to the loop.
"""

import logging
import shutil
import subprocess
import threading
from collections.abc import Callable

from ..clock import Clock

logger = logging.getLogger(__name__)

# Words per minute at rate 1.0
SAY_BASE_RATE = 175
ESPEAK_BASE_RATE = 175


class CommandSpeechBackend:
    """Text-to-speech backend driving `say` or `espeak`."""

    def __init__(self, clock: Clock, command: str | None = None, voice: str | None = None) -> None:
        """Initialize the backend.

        Args:
            clock: Loop that receives completion callbacks
            command: "say" or "espeak"; auto-detected when None
            voice: Optional voice name passed to the command
        """
        self._clock = clock
        self._voice = voice
        self._command = command or ("say" if shutil.which("say") else "espeak")
        self._path = shutil.which(self._command)
        self._process: subprocess.Popen[bytes] | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def is_available(self) -> bool:
        """Check if the speech command exists."""
        return self._path is not None

    @property
    def command(self) -> str:
        """Get the speech command name."""
        return self._command

    def speak(
        self,
        text: str,
        rate: float,
        pitch: float,
        volume: float,
        on_done: Callable[[], None],
    ) -> None:
        """Start a speech process for text."""
        if not self.is_available:
            raise RuntimeError(f"Speech command not available: {self._command}")

        self.cancel()
        cmd = self._build_command(text, rate, pitch, volume)

        with self._lock:
            self._generation += 1
            generation = self._generation
            self._process = subprocess.Popen(
                cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL
            )
            process = self._process

        threading.Thread(
            target=self._wait,
            args=(process, generation, on_done),
            name="speech-waiter",
            daemon=True,
        ).start()

    def cancel(self) -> None:
        """Terminate the running speech process."""
        with self._lock:
            self._generation += 1
            process = self._process
            self._process = None

        if process is not None and process.poll() is None:
            process.terminate()
            logger.debug("Speech process terminated")

    def _build_command(self, text: str, rate: float, pitch: float, volume: float) -> list[str]:
        if self._command == "say":
            cmd = ["say", "-r", str(int(SAY_BASE_RATE * rate))]
            if self._voice:
                cmd += ["-v", self._voice]
            # say has no pitch or volume flags
            return cmd + [text or " "]

        cmd = [
            "espeak",
            "-s",
            str(int(ESPEAK_BASE_RATE * rate)),
            "-p",
            str(max(0, min(99, int(50 * pitch)))),
            "-a",
            str(max(0, min(200, int(100 * volume)))),
        ]
        if self._voice:
            cmd += ["-v", self._voice]
        return cmd + [text or " "]

    def _wait(self, process: subprocess.Popen[bytes], generation: int, on_done: Callable[[], None]) -> None:
        returncode = process.wait()
        with self._lock:
            current = generation == self._generation
            if current:
                self._process = None

        if not current:
            return
        if returncode != 0:
            logger.warning(f"Speech command exited with status {returncode}")
        self._clock.call_soon(on_done)


__all__ = ["CommandSpeechBackend"]

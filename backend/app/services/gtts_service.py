"""
Accounting Notes Backend: gTTS Speech Synthesizer
=================================================

What:  SpeechSynthesizer backed by the gTTS library (Google Translate TTS).
How:   gTTS writes an MP3 into a uniquely named temporary file; the file is
       read back, size-checked and always deleted before returning.
Who:   Module singleton `gtts_synthesizer`, used by NotesService.

Resilience:
    1. tenacity retries gTTSError / OSError with exponential backoff + jitter
    2. gTTS HTTP calls are bounded by settings.tts_timeout
    3. The blocking gTTS call runs in a worker thread (asyncio.to_thread)
    4. Output under settings.tts_min_audio_bytes is treated as failure

Temporary files:
    <tts_temp_dir or system temp>/narration_<uuid4 hex>.mp3
    A fresh name per call keeps concurrent synthesis requests apart.
"""

import asyncio
import logging
import os
import tempfile
import time
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
from gtts import gTTS, gTTSError
from gtts.lang import tts_langs
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.config import settings
from app.exceptions import SynthesisError
from app.services.text_normalizer import is_meaningful
from app.services.tts_base import SpeechSynthesizer

logger = logging.getLogger(__name__)


class GTTSSynthesizer(SpeechSynthesizer):
    """
    gTTS implementation of SpeechSynthesizer.

    Every constructor argument defaults to the matching setting; tests pass
    zero retry waits and a tmp_path temp_dir.
    """

    def __init__(
        self,
        min_bytes: Optional[int] = None,
        timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        retry_min_wait: Optional[float] = None,
        retry_max_wait: Optional[float] = None,
        temp_dir: Optional[str] = None,
    ):
        self.min_bytes = min_bytes if min_bytes is not None else settings.tts_min_audio_bytes
        self.timeout = timeout if timeout is not None else settings.tts_timeout
        self.retry_attempts = retry_attempts or settings.tts_retry_max_attempts
        self.retry_min_wait = retry_min_wait if retry_min_wait is not None else settings.tts_retry_min_wait
        self.retry_max_wait = retry_max_wait if retry_max_wait is not None else settings.tts_retry_max_wait
        self.temp_dir = Path(temp_dir or settings.tts_temp_dir or tempfile.gettempdir())

    def _temp_path(self) -> Path:
        return self.temp_dir / f"narration_{uuid.uuid4().hex}.mp3"

    async def synthesize(self, text: str, language: str) -> bytes:
        """
        Flow:
            1. Reject text without letters or digits (gTTS raises on it anyway)
            2. Render to a fresh temporary file, with retries
            3. Read the file back and check its size
            4. Delete the file, whatever happened

        Raises:
            SynthesisError: see SpeechSynthesizer.synthesize
        """
        if not is_meaningful(text):
            raise SynthesisError(
                message="Brak tekstu do odczytania",
                context={"length": len(text or "")},
            )

        path = self._temp_path()
        start_time = time.time()

        try:
            await self._render_with_retry(text, language, path)

            if not path.exists():
                raise SynthesisError(context={"reason": "no output file"})

            async with aiofiles.open(path, "rb") as f:
                audio = await f.read()

            if len(audio) < self.min_bytes:
                raise SynthesisError(
                    context={"reason": "audio too small", "bytes": len(audio), "min_bytes": self.min_bytes}
                )

            logger.info(
                "Synthesized %d chars into %d bytes of audio in %.0fms",
                len(text),
                len(audio),
                (time.time() - start_time) * 1000,
            )
            return audio

        except SynthesisError:
            raise
        except (gTTSError, OSError, ValueError) as e:
            logger.error("gTTS synthesis failed: %s", str(e))
            raise SynthesisError(context={"error_type": type(e).__name__, "error": str(e)})
        finally:
            self._cleanup(path)

    async def _render_with_retry(self, text: str, language: str, path: Path) -> None:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type((gTTSError, OSError)),
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry_min_wait,
                max=self.retry_max_wait,
                jitter=1,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                await asyncio.to_thread(self._render, text, language, path)

    def _render(self, text: str, language: str, path: Path) -> None:
        # Blocking: performs HTTP requests and writes the file
        gTTS(text, lang=language, timeout=self.timeout).save(str(path))

    @staticmethod
    def _cleanup(path: Path) -> None:
        try:
            if path.exists():
                os.remove(path)
                logger.debug("Removed temporary audio file %s", path.name)
        except OSError as e:
            logger.warning("Failed to remove temporary audio file %s: %s", path.name, str(e))

    async def health_check(self) -> bool:
        try:
            languages = await asyncio.to_thread(tts_langs)
        except Exception as e:
            logger.warning("gTTS health check failed: %s", str(e))
            return False
        return settings.tts_language in languages


# ── Singleton Instance ────────────────────────────────────────────────────
gtts_synthesizer = GTTSSynthesizer()

"""
Accounting Notes Backend: Abstract Speech Synthesizer Interface
===============================================================

What:  Contract for services that turn normalized text into audio bytes.
How:   Concrete implementations inherit from SpeechSynthesizer and implement
       synthesize() and health_check().
Who:   Called by NotesService after the note text has been normalized.

Implementations:
    - GTTSSynthesizer: Google Translate TTS through the gTTS library
    - Tests pass an AsyncMock with the same two methods
"""

from abc import ABC, abstractmethod


class SpeechSynthesizer(ABC):
    """
    Abstract interface for text-to-speech engines.

    Contract:
        - synthesize() returns complete MP3 bytes or raises SynthesisError
        - implementations own their retries and temporary files; nothing
          they create outlives the call
        - the caller never sees engine-specific exceptions
    """

    @abstractmethod
    async def synthesize(self, text: str, language: str) -> bytes:
        """
        Render `text` as speech in `language`.

        Args:
            text:     Normalized text containing at least one letter or digit.
            language: Engine language code, e.g. "pl".

        Returns:
            bytes: MP3 audio, never empty.

        Raises:
            SynthesisError: engine failure, missing output, or output below
                the minimum plausible audio size.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Cheap readiness probe that does not synthesize anything.

        Returns: True if the engine can serve the configured language.
        """
        ...

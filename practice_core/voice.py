"""Optional voice output for AI turns

The session never calls a speaker directly. ``VoiceRelay`` listens to session
events and decides what to speak.
"""

import logging
import os
import subprocess
import tempfile
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import requests

from .config import DEFAULT_VOICE_PLAYER, DEFAULT_VOICEVOX_URL
from .events import SessionEvent

logger = logging.getLogger(__name__)


class Speaker:
    """Text-to-speech output"""

    def speak(self, text: str, voice_hint: Optional[str] = None) -> None:
        raise NotImplementedError

    def cancel(self) -> None:
        raise NotImplementedError


class Transcriber:
    """One-shot speech recognition"""

    async def listen(self) -> str:
        raise NotImplementedError


class VoicevoxSpeaker(Speaker):
    """Speaker backed by a local VOICEVOX engine

    Synthesized audio is written to a temporary WAV file and played with an
    external player command (``afplay`` by default).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        speaker_id: int = 3,
        player: Optional[str] = None,
        speed_scale: float = 1.1,
    ):
        self.base_url = (base_url or os.getenv("VOICEVOX_URL", DEFAULT_VOICEVOX_URL)).rstrip("/")
        self.speaker_id = speaker_id
        self.player = player or os.getenv("VOICE_PLAYER", DEFAULT_VOICE_PLAYER)
        self.speed_scale = speed_scale
        self._playback: Optional[subprocess.Popen] = None
        self._generation = 0

    def is_available(self) -> bool:
        """Check whether the engine is running"""
        try:
            response = requests.get(f"{self.base_url}/speakers", timeout=2)
            return response.status_code == 200
        except requests.RequestException:
            return False

    def synthesize(self, text: str, speaker_id: Optional[int] = None) -> str:
        """Synthesize speech and return the path of the WAV file"""
        speaker = speaker_id if speaker_id is not None else self.speaker_id
        query_response = requests.post(
            f"{self.base_url}/audio_query",
            params={"text": text, "speaker": speaker},
            timeout=30,
        )
        query_response.raise_for_status()
        query = query_response.json()
        query["speedScale"] = self.speed_scale

        synthesis_response = requests.post(
            f"{self.base_url}/synthesis",
            params={"speaker": speaker},
            json=query,
            timeout=60,
        )
        synthesis_response.raise_for_status()

        with tempfile.NamedTemporaryFile(suffix=".wav", delete=False) as f:
            f.write(synthesis_response.content)
            return f.name

    def speak(self, text: str, voice_hint: Optional[str] = None) -> None:
        """Synthesize and play ``text``, returning when playback ends

        Nothing is played if ``cancel()`` is called during synthesis. The WAV
        file is removed afterwards.
        """
        generation = self._generation
        speaker_id = int(voice_hint) if voice_hint and voice_hint.isdigit() else None
        wav_path = self.synthesize(text, speaker_id)
        try:
            if generation != self._generation:
                return
            self._playback = subprocess.Popen(
                [self.player, wav_path],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
            self._playback.wait()
        finally:
            self._playback = None
            if os.path.exists(wav_path):
                os.remove(wav_path)

    def cancel(self) -> None:
        self._generation += 1
        playback = self._playback
        if playback is not None and playback.poll() is None:
            playback.terminate()


class VoiceRelay:
    """Speaks AI turns from session events

    Speech runs on a worker thread so synthesis never blocks the session.
    """

    def __init__(self, speaker: Speaker, enabled: bool = True, voice_hint: Optional[str] = None):
        self.speaker = speaker
        self.enabled = enabled
        self.voice_hint = voice_hint
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="voice")
        self._generation = 0

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        if not self.enabled:
            self.cancel()
        return self.enabled

    def cancel(self) -> None:
        """Stop current speech and drop turns still waiting to be spoken"""
        self._generation += 1
        self.speaker.cancel()

    def __call__(self, event: SessionEvent) -> None:
        if event.kind == "speech_cancelled":
            self.cancel()
        elif event.kind == "turn_received" and self.enabled:
            self._executor.submit(self._speak, event.payload.get("text", ""), self._generation)

    def _speak(self, text: str, generation: int) -> None:
        if not text or generation != self._generation:
            return
        try:
            self.speaker.speak(text, self.voice_hint)
        except (requests.RequestException, OSError) as e:
            logger.warning("Speech output failed: %s", e)

    def close(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)

import shlex
import subprocess
from typing import Optional

from ai_cli.config.settings import settings
from ai_cli.domain.exceptions import SpeechError


class SaySpeaker:
    """调用系统朗读命令（默认 macOS ``say``）读出回复文本。"""

    def __init__(self, command: Optional[str] = None):
        self._argv = shlex.split(command or settings.speech_command)

    def speak(self, text: str) -> None:
        if not text.strip():
            return
        try:
            subprocess.run([*self._argv, text], check=True)
        except FileNotFoundError:
            raise SpeechError(code="SPEECH_ERROR", message=f"Speech command not found: {self._argv[0]}")
        except subprocess.CalledProcessError as e:
            raise SpeechError(code="SPEECH_ERROR", message=f"Speech command failed with exit code {e.returncode}")

"""Local storage of generated artifacts."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import config
from .models import GenerationTask

logger = logging.getLogger(__name__)


class ArtifactStore:
    """Write each task's video, narration, captions and metadata under one directory."""

    VIDEO_NAME = "video.mp4"
    AUDIO_NAME = "narration.wav"
    CAPTIONS_NAME = "captions.vtt"
    METADATA_NAME = "task.json"

    def __init__(self, root: Optional[Path] = None) -> None:
        self._root = Path(root) if root is not None else config.workspace

    @property
    def root(self) -> Path:
        return self._root

    def task_dir(self, task_id: str) -> Path:
        return self._root / task_id

    def save_video(self, task_id: str, data: bytes) -> str:
        return self._write_bytes(task_id, self.VIDEO_NAME, data)

    def save_audio(self, task_id: str, data: bytes) -> str:
        return self._write_bytes(task_id, self.AUDIO_NAME, data)

    def save_captions(self, task_id: str, document: str) -> str:
        path = self._prepare(task_id, self.CAPTIONS_NAME)
        path.write_text(document, encoding="utf-8")
        return str(path)

    def save_metadata(self, task: GenerationTask) -> Path:
        """Save a task's request, status and result to a JSON file."""
        metadata = {
            "saved_at": datetime.now().isoformat(),
            "task": task.model_dump(mode="json"),
        }
        path = self._prepare(task.id, self.METADATA_NAME)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(metadata, f, indent=2, ensure_ascii=False)

        logger.info(f"Saved task metadata to {path}")
        return path

    def _write_bytes(self, task_id: str, name: str, data: bytes) -> str:
        path = self._prepare(task_id, name)
        path.write_bytes(data)
        logger.debug(f"Wrote {len(data)} bytes to {path}")
        return str(path)

    def _prepare(self, task_id: str, name: str) -> Path:
        path = self.task_dir(task_id) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

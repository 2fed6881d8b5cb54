"""WebVTT caption timeline parsing."""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

WEBVTT_HEADER = "WEBVTT"

_FENCE = re.compile(r"```(?:vtt|webvtt)?\s*\n?|```", re.IGNORECASE)


@dataclass(frozen=True)
class Cue:
    """Half-open interval [start, end) in seconds."""

    start: float
    end: float

    def contains(self, time: float) -> bool:
        return self.start <= time < self.end

    @property
    def duration(self) -> float:
        return self.end - self.start


def parse_timestamp(value: str) -> float:
    """Convert ``H:MM:SS.mmm`` or ``MM:SS.mmm`` to seconds.

    Raises:
        ValueError: If the value is not a timestamp.
    """
    parts = value.strip().replace(",", ".").split(":")
    if len(parts) not in (2, 3) or not all(parts):
        raise ValueError(f"Invalid timestamp: {value!r}")

    numbers = [float(part) for part in parts]
    if len(numbers) == 3:
        hours, minutes, seconds = numbers
    else:
        hours = 0.0
        minutes, seconds = numbers
    return hours * 3600 + minutes * 60 + seconds


def _parse_timing_line(line: str) -> Optional[Cue]:
    start_text, _, rest = line.partition("-->")
    end_tokens = rest.split()
    if not end_tokens:
        return None
    try:
        start = parse_timestamp(start_text)
        # cue settings may follow the end timestamp
        end = parse_timestamp(end_tokens[0])
    except ValueError:
        return None
    if end < start:
        return None
    return Cue(start=start, end=end)


def parse_cues(document: str) -> List[Cue]:
    """Parse every timing line of a caption document into cues.

    Cues are returned in document order; malformed timing lines are skipped.
    """
    if not document:
        return []

    cues: List[Cue] = []
    for number, line in enumerate(document.splitlines(), start=1):
        if "-->" not in line:
            continue
        cue = _parse_timing_line(line)
        if cue is None:
            logger.debug(f"Skipping malformed timing line {number}: {line!r}")
            continue
        cues.append(cue)
    return cues


def find_cue_index(cues: Sequence[Cue], time: float) -> int:
    """Return the index of the first cue containing ``time``, or -1."""
    for index, cue in enumerate(cues):
        if cue.contains(time):
            return index
    return -1


def normalize_caption_document(text: str) -> str:
    """Strip markdown fences and make sure the document starts with the header."""
    document = _FENCE.sub("", text).strip()
    if not document.startswith(WEBVTT_HEADER):
        document = f"{WEBVTT_HEADER}\n\n{document}"
    return document + "\n"

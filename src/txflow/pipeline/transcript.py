import logging
from typing import Any, Iterator, List, Optional, Tuple

from txflow.models import Stage, TranscriptEntry

_logger = logging.getLogger(__name__)


class Transcript(object):
    """Append-only journal of the outcome of each pipeline step."""

    def __init__(self, inputs: Optional[Any] = None) -> None:
        self._inputs = inputs
        self._entries: List[TranscriptEntry] = []

    def append(self, stage: Stage, result: Optional[Any] = None) -> TranscriptEntry:
        # the run inputs go with the first entry
        inputs = self._inputs if len(self._entries) == 0 else None
        entry = TranscriptEntry(stage=stage, inputs=inputs, result=result)
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> Tuple[TranscriptEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TranscriptEntry]:
        return iter(tuple(self._entries))

    def log(self, level: int = logging.INFO, logger: logging.Logger = _logger):
        for entry in self._entries:
            if entry.inputs is not None:
                logger.log(level, f"{entry.stage.name} inputs: {entry.inputs}")
            logger.log(level, f"{entry.stage.name} result: {entry.result}")

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

FIRST_COMPLETION_POINTS = 10
MAX_SCORE = 150

WIRE_NAMES = {
    "level": "level",
    "commands_used": "commandsUsed",
    "time_taken": "timeTaken",
    "energized": "energized",
    "success": "success",
}


@dataclass(frozen=True)
class ProgressRecord:
    level: int
    commands_used: int
    time_taken: int
    energized: bool
    success: bool

    def to_dict(self) -> Dict[str, Union[int, bool]]:
        return {WIRE_NAMES[key]: value for key, value in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Union[int, bool]]) -> "ProgressRecord":
        return cls(
            level=int(data["level"]),
            commands_used=int(data.get("commandsUsed", 0)),
            time_taken=int(data.get("timeTaken", 0)),
            energized=bool(data.get("energized", False)),
            success=bool(data["success"]),
        )

    def beats(self, other: "ProgressRecord") -> bool:
        """Fewer commands wins; equal commands fall back to less time."""
        if self.commands_used != other.commands_used:
            return self.commands_used < other.commands_used
        return self.time_taken < other.time_taken


class MemoryProgressRecorder:
    def __init__(self):
        self._records: List[ProgressRecord] = []

    def record(self, record: ProgressRecord) -> None:
        self._records.append(record)

    def records(self) -> List[ProgressRecord]:
        return list(self._records)

    def max_level_completed(self) -> int:
        return max((r.level for r in self.records() if r.success), default=0)

    def score(self) -> int:
        """Points for each level completed for the first time, capped at ``MAX_SCORE``."""
        completed = set()
        total = 0
        for record in self.records():
            if record.success and record.level not in completed:
                completed.add(record.level)
                total = min(MAX_SCORE, total + FIRST_COMPLETION_POINTS)
        return total

    def best_for_level(self, level: int) -> Optional[ProgressRecord]:
        best = None
        for record in self.records():
            if record.level != level or not record.success:
                continue
            if best is None or record.beats(best):
                best = record
        return best


class JsonProgressRecorder(MemoryProgressRecorder):
    """Keeps records in a JSON array on disk, rewriting the file on each record."""

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            with open(self.path, "r", encoding="utf-8") as fh:
                raw = json.load(fh)
            if not isinstance(raw, list):
                raise ValueError(f"Progress file {self.path} must hold a JSON array")
            self._records = [ProgressRecord.from_dict(entry) for entry in raw]

    def record(self, record: ProgressRecord) -> None:
        super().record(record)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump([r.to_dict() for r in self._records], fh, indent=2)
        logger.info("Recorded progress for level %d (success=%s) in %s", record.level, record.success, self.path)

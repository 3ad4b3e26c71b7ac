"""
Timetable store: keeps the current mosque timetable in a local JSON file.
A new upload replaces the stored timetable wholesale.
"""
import json
from pathlib import Path
from typing import List, Optional

from config import config
from logging_config import configure_logging
from parser.models import DailyPrayerTime
from utils.common import generate_timetable_id, utc_now_iso

logger = configure_logging(name="storage")


class TimetableStore:
    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or config.STORAGE_PATH)

    def _load(self) -> Optional[dict]:
        if not self.path.exists():
            return None
        return json.loads(self.path.read_text(encoding="utf-8"))

    def _save(self, data: dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)

    def save_timetable(self, mosque_name: str, days: List[DailyPrayerTime]) -> dict:
        now = utc_now_iso()
        record = {
            "id": generate_timetable_id(),
            "mosqueName": mosque_name,
            "createdAt": now,
            "updatedAt": now,
            "times": [d.to_dict() for d in days],
        }
        self._save(record)
        logger.info(f"[STORAGE] Saved {len(days)} days for {mosque_name!r} -> {self.path}")
        return record

    def get_timetable(self) -> Optional[dict]:
        return self._load()

    def get_all_prayer_times(self) -> List[DailyPrayerTime]:
        record = self._load()
        if not record:
            return []
        return [DailyPrayerTime.from_dict(t) for t in record.get("times") or []]

    def clear(self):
        if self.path.exists():
            self.path.unlink()

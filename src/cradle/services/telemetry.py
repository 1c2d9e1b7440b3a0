from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping


@dataclass
class TelemetryService:
    path: Path

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.log_many([{"type": event_type, **payload}])

    def log_many(self, events: Iterable[Mapping[str, object]]) -> None:
        """Append engine events (dicts carrying a "type" key) as JSON lines."""
        records = []
        ts = datetime.now(tz=timezone.utc).isoformat()
        for ev in events:
            payload = {k: v for k, v in ev.items() if k != "type"}
            records.append({"ts": ts, "type": ev.get("type", "UNKNOWN"), "payload": payload})
        if not records:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            for rec in records:
                f.write(json.dumps(rec, ensure_ascii=False) + "\n")

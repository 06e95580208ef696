import json
from collections import Counter, deque


class Telemetry:
    def __init__(self, maxlen: int | None = None):
        # maxlen=None keeps every record (needed for dump); otherwise a trailing window
        self.frames = deque(maxlen=maxlen)
        self.actions = Counter()

    def log_frame(self, idx: int, rec: dict):
        rec["frame_idx"] = idx
        self.frames.append(rec)
        self.actions[rec.get("action")] += 1

    def count(self, action: str) -> int:
        """Total records with this action, including ones dropped from the window."""
        return self.actions[action]

    def dump(self, path: str):
        with open(path, "w", encoding="utf-8") as f:
            json.dump(list(self.frames), f, indent=2)

import json
import io
import os


class TelemetryWriter:
    def __init__(self, path: str, fmt: str = "jsonl"):
        if fmt not in ("jsonl", "csv"):
            raise ValueError(f"Unsupported telemetry format '{fmt}'")
        self.path = path
        self.fmt = fmt
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        self.f = io.open(self.path, "w", encoding="utf8")
        self._csv_keys = None

    def write(self, row: dict):
        if self.fmt == "jsonl":
            self.f.write(json.dumps(row, ensure_ascii=False) + "\n")
        else:
            if self._csv_keys is None:
                self._csv_keys = list(row.keys())
                self.f.write(",".join(self._csv_keys) + "\n")
            vals = [str(row.get(k, "")) for k in self._csv_keys]
            self.f.write(",".join(vals) + "\n")
        self.f.flush()

    def close(self):
        self.f.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

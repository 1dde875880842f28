import csv, os
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

# CSV columns:
# seq,key,handler,ok,error
# Example:
# 0,6,Foo,1,
# 1,6,on_tick,0,ValueError: bad tick

FIELDNAMES = ["seq", "key", "handler", "ok", "error"]

# One lock per trace file, shared by every DispatchLog writing to it
_path_locks: Dict[str, threading.Lock] = {}
_path_locks_guard = threading.Lock()


def _lock_for(path: str) -> threading.Lock:
    with _path_locks_guard:
        return _path_locks.setdefault(os.path.abspath(path), threading.Lock())


@dataclass
class DispatchRecord:
    seq: int
    key: str
    handler: str
    ok: bool
    error: str = ""


class DispatchLog:
    """
    Append-only CSV trace of handler invocations.

    One row per handler call made by publish(). ``seq`` numbers publish()
    calls of one registry, so every handler fired by the same emission
    shares a seq.

    Several logs (e.g. every registry picking up config.DISPATCH_LOG_PATH)
    may point at the same file: rows are appended under a per-path lock and
    flushed immediately, and the header is written only to an empty file.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        log_dir = os.path.dirname(path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        self._lock = _lock_for(path)
        with self._lock:
            self._file = open(path, "a", newline="", encoding="utf-8")
            self._writer = csv.DictWriter(self._file, fieldnames=FIELDNAMES)
            if self._file.tell() == 0:
                self._writer.writeheader()
                self._file.flush()

    @property
    def closed(self) -> bool:
        return self._file is None

    def write(self, seq: int, key, handler: str, error: Optional[BaseException] = None) -> None:
        with self._lock:
            if self._file is None:
                return
            self._writer.writerow({
                "seq": seq,
                "key": key,
                "handler": handler,
                "ok": 0 if error is not None else 1,
                "error": "" if error is None else f"{type(error).__name__}: {error}",
            })
            self._file.flush()

    def close(self) -> None:
        """Flush and close the trace file."""
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None
                self._writer = None

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def load_dispatch_log(path: str) -> List[DispatchRecord]:
    """Read a trace written by DispatchLog back into records, in file order."""
    records: List[DispatchRecord] = []
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row in reader:
            records.append(
                DispatchRecord(
                    seq=int(row["seq"]),
                    key=row["key"],
                    handler=row["handler"],
                    ok=(row.get("ok") or "").strip() == "1",
                    error=row.get("error") or "",
                )
            )
    return records

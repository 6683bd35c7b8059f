import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


def utc_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


@dataclass
class RunLogger:
    """
    Append-only JSONL run logger.

    Each call writes one JSON object per line to log_path.
    `generation` is the pipeline generation number the event belongs to, so
    events from overlapping runs can be told apart. With log_path=None the
    logger only keeps events in memory (handy for tests and dry runs).
    """
    run_id: str
    log_path: Optional[Path] = None
    generation: int = 0
    events: list[dict[str, Any]] = field(default_factory=list)

    def for_generation(self, generation: int) -> "RunLogger":
        """Return a logger sharing this one's sink, tagged with `generation`."""
        return replace(self, generation=generation)

    def _write(self, payload: dict[str, Any]) -> None:
        self.events.append(payload)
        if self.log_path is None:
            return
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with self.log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")

    def _base(self, agent: str, event: str, status: str) -> dict[str, Any]:
        return {
            "ts": utc_iso(),
            "run_id": self.run_id,
            "generation": self.generation,
            "agent": agent,
            "event": event,
            "status": status,
        }

    def start(self, agent: str, input: Any) -> None:
        self._write({**self._base(agent, "start", "ok"), "input": input})

    def end(self, agent: str, output: Any, metrics: Optional[dict[str, Any]] = None) -> None:
        self._write({**self._base(agent, "end", "ok"), "output": output, "metrics": metrics or {}})

    def status(self, agent: str, status: str, text: str = "") -> None:
        self._write({**self._base(agent, "status", status), "text": text})

    def error(self, agent: str, input: Any, err: Exception) -> None:
        self._write({
            **self._base(agent, "error", "error"),
            "input": input,
            "error": {
                "type": err.__class__.__name__,
                "kind": getattr(err, "kind", None),
                "stage": getattr(err, "stage", None),
                "message": str(err),
            },
        })


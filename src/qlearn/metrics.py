"""Console logging setup and a JSONL metrics logger.

Usage::

    from qlearn.metrics import MetricsLogger, setup_logging

    setup_logging()
    with MetricsLogger("runs/grid/metrics.jsonl") as metrics:
        trainer.train(agent, term, explore, callback=lambda i, rec: metrics.write(rec))
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import IO, Any

import jax.numpy as jnp
import numpy as np

# ---------------------------------------------------------------------------
# Structured console logging
# ---------------------------------------------------------------------------

_LEVEL_ABBREV = {
    logging.DEBUG: "D",
    logging.INFO: "I",
    logging.WARNING: "W",
    logging.ERROR: "E",
    logging.CRITICAL: "C",
}


class _TrainFormatter(logging.Formatter):
    """Compact formatter: abbreviated level + millisecond timestamp.

    Example output::

        I 2026-02-15 14:30:22.123 [qlearn.dqn.trainer] batch 40 | loss=0.42
    """

    def format(self, record: logging.LogRecord) -> str:
        lvl = _LEVEL_ABBREV.get(record.levelno, "?")
        ts = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        ms = int(record.msecs)
        msg = record.getMessage()
        return f"{lvl} {ts}.{ms:03d} [{record.name}] {msg}"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure the ``qlearn`` logger with compact formatting.

    Safe to call multiple times; existing handlers are replaced.
    """
    logger = logging.getLogger("qlearn")
    logger.setLevel(level)

    for h in logger.handlers[:]:
        logger.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(_TrainFormatter())
    logger.addHandler(handler)
    logger.propagate = False


def format_metrics(metrics: dict[str, Any]) -> str:
    """Render scalar metrics as ``k=v`` pairs, floats to 4 significant digits."""
    parts = []
    for k, v in metrics.items():
        v = _to_python(v)
        parts.append(f"{k}={v:.4g}" if isinstance(v, float) else f"{k}={v}")
    return " ".join(parts)


def log_step_progress(
    step: int,
    metrics: dict[str, Any] | None = None,
    *,
    unit: str = "batch",
    logger_name: str = "qlearn",
) -> None:
    """Log a one-line progress message such as ``batch 40 | loss=0.42``.

    The ``step`` and ``wall_time`` keys of *metrics* are skipped.
    """
    parts = [f"{unit} {step}"]
    if metrics:
        kv = format_metrics(
            {k: v for k, v in metrics.items() if k not in ("step", unit, "wall_time")}
        )
        if kv:
            parts.append(kv)
    logging.getLogger(logger_name).info(" | ".join(parts))


# ---------------------------------------------------------------------------
# MetricsLogger
# ---------------------------------------------------------------------------


class MetricsLogger:
    """Append-only JSONL logger.

    Parameters
    ----------
    path:
        Path to the JSONL file.  Parent directories are created
        automatically.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file: IO[str] = open(self._path, "a")  # noqa: SIM115
        self._start_time = time.monotonic()

    def write(self, record: dict[str, Any]) -> None:
        """Write one record as a JSON line.

        Adds ``wall_time`` (seconds since the logger was created) unless
        already present.  JAX/numpy scalars are converted to Python types.
        """
        row = {k: _to_python(v) for k, v in record.items()}
        if "wall_time" not in row:
            row["wall_time"] = round(time.monotonic() - self._start_time, 3)
        self._file.write(json.dumps(row, default=str) + "\n")
        self._file.flush()

    def close(self) -> None:
        self._file.close()

    @property
    def path(self) -> Path:
        return self._path

    def __enter__(self) -> MetricsLogger:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"MetricsLogger({self._path})"


def read_metrics(path: str | Path) -> list[dict[str, Any]]:
    """Read all records from a JSONL metrics file."""
    p = Path(path)
    if not p.exists():
        return []
    records = []
    for line in p.read_text().splitlines():
        line = line.strip()
        if line:
            records.append(json.loads(line))
    return records


def _to_python(val: Any) -> Any:
    """Convert JAX/numpy scalars to plain Python types for JSON."""
    if isinstance(val, (jnp.ndarray, np.ndarray)):
        return val.item()
    if isinstance(val, (np.integer, np.floating, np.bool_)):
        return val.item()
    return val

"""Persistence for learned values.

Two formats:

- Network snapshots (``DQNAgentTrainer.export_model()``) are written with
  Equinox's leaf serialization, plus an optional ``metadata.json`` with
  the sizes needed to rebuild a template.
- Tabular Q tables (``AgentTrainer``) are written as JSON.  States and
  actions are arbitrary Python objects, so callers pass encoders /
  decoders; dataclass instances work with the defaults on the way out.

Usage::

    from qlearn.checkpoint import save_model, load_model

    save_model("runs/grid", trainer.export_model(), metadata={"gamma": 0.9})
    trainer.import_model(load_model("runs/grid", trainer.export_model()))
"""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Callable, TypeVar

import equinox as eqx

T = TypeVar("T")

logger = logging.getLogger(__name__)

_MODEL_FILE = "model.eqx"
_METADATA_FILE = "metadata.json"


# ---------------------------------------------------------------------------
# Equinox serialization
# ---------------------------------------------------------------------------


def save_eqx(path: str | Path, pytree: Any) -> Path:
    """Save a pytree using Equinox's built-in serialization.

    Parameters
    ----------
    path:
        File path for the snapshot (conventionally ``*.eqx``).  Parent
        directories are created.
    pytree:
        The pytree to save, typically a ``QNetwork``.

    Returns
    -------
    The path that was written.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    eqx.tree_serialise_leaves(str(p), pytree)
    return p


def load_eqx(path: str | Path, like: T) -> T:
    """Load a pytree saved with :func:`save_eqx`.

    *like* must have the same structure, shapes and dtypes as the saved
    data, e.g. a freshly built network of the same sizes.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"No snapshot at {p}")
    return eqx.tree_deserialise_leaves(str(p), like)


def save_model(
    directory: str | Path,
    model: Any,
    *,
    metadata: dict[str, Any] | None = None,
) -> Path:
    """Write ``directory/model.eqx`` and, if given, ``directory/metadata.json``."""
    d = Path(directory)
    save_eqx(d / _MODEL_FILE, model)
    if metadata is not None:
        (d / _METADATA_FILE).write_text(json.dumps(metadata, indent=2, default=str) + "\n")
    logger.info("Saved model to %s", d)
    return d


def load_model(directory: str | Path, like: T) -> T:
    """Read a model written by :func:`save_model` into the shape of *like*."""
    return load_eqx(Path(directory) / _MODEL_FILE, like)


def load_metadata(directory: str | Path) -> dict[str, Any] | None:
    """Metadata saved alongside a model, or ``None`` if there is none."""
    meta_path = Path(directory) / _METADATA_FILE
    if meta_path.exists():
        return json.loads(meta_path.read_text())
    return None


# ---------------------------------------------------------------------------
# Tabular Q tables (JSON)
# ---------------------------------------------------------------------------


def _default_encode(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    return obj


def save_q_table(
    path: str | Path,
    q: dict[Any, dict[Any, float]],
    *,
    encode_state: Callable[[Any], Any] | None = None,
    encode_action: Callable[[Any], Any] | None = None,
) -> Path:
    """Write a ``{state: {action: value}}`` table as a JSON list of records.

    Each record is ``{"state": ..., "values": [{"action": ..., "value": ...}]}``.
    Encoders must return JSON-serializable objects; the default turns
    dataclass instances into dicts and passes anything else through.
    """
    encode_state = encode_state or _default_encode
    encode_action = encode_action or _default_encode
    records = [
        {
            "state": encode_state(state),
            "values": [
                {"action": encode_action(action), "value": float(value)}
                for action, value in values.items()
            ],
        }
        for state, values in q.items()
    ]
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(records) + "\n")
    logger.info("Saved %d states to %s", len(records), p)
    return p


def load_q_table(
    path: str | Path,
    *,
    decode_state: Callable[[Any], Any],
    decode_action: Callable[[Any], Any],
) -> dict[Any, dict[Any, float]]:
    """Read a table written by :func:`save_q_table`.

    Decoders receive the JSON value written by the matching encoder, e.g.
    ``lambda d: GridState(**d)``.
    """
    records = json.loads(Path(path).read_text())
    return {
        decode_state(rec["state"]): {
            decode_action(entry["action"]): float(entry["value"])
            for entry in rec["values"]
        }
        for rec in records
    }

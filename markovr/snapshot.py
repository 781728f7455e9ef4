"""Flat snapshot (de)serialization of a trained chain."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Hashable, List, Mapping, Union

from .chain import MarkovChain
from .domain import ChainConfig, InvalidSnapshot, Known, MarkovError

logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT_VERSION = 1

_REQUIRED_KEYS = ("order", "wildcard_dimensions", "contexts")


def to_snapshot(chain: MarkovChain) -> Dict[str, Any]:
    """
    Capture everything needed to rebuild `chain` exactly.

    Only the trained windows are stored; marginal tables are derived
    data and are rebuilt by from_snapshot().
    """
    contexts: List[Dict[str, Any]] = []
    for key, distribution in chain.contexts():
        contexts.append(
            {
                "context": list(key),
                "outcomes": [[element, weight] for element, weight in distribution.items()],
            }
        )
    return {
        "version": SNAPSHOT_FORMAT_VERSION,
        "order": chain.order,
        "wildcard_dimensions": list(chain.wildcard_dimensions),
        "sliding_window": chain.config.sliding_window,
        "contexts": contexts,
    }


def _freeze(value: Any) -> Hashable:
    """JSON arrays come back as lists; elements must stay hashable."""
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def from_snapshot(data: Mapping[str, Any], **chain_kwargs: Any) -> MarkovChain:
    """
    Rebuild a chain from to_snapshot() output.

    Extra keyword arguments (e.g. rng) are passed to MarkovChain.

    Raises:
        InvalidSnapshot: If the data is structurally wrong or any
            stored entry would be rejected by train()
    """
    if not isinstance(data, Mapping):
        raise InvalidSnapshot(f"snapshot must be a mapping, got {type(data).__name__}")
    missing = [k for k in _REQUIRED_KEYS if k not in data]
    if missing:
        raise InvalidSnapshot(f"snapshot is missing keys: {missing}")
    version = data.get("version", SNAPSHOT_FORMAT_VERSION)
    if version != SNAPSHOT_FORMAT_VERSION:
        raise InvalidSnapshot(
            f"unsupported snapshot version {version!r}, "
            f"expected {SNAPSHOT_FORMAT_VERSION}"
        )

    try:
        config = ChainConfig(
            order=data["order"],
            wildcard_dimensions=tuple(data["wildcard_dimensions"]),
            sliding_window=bool(data.get("sliding_window", False)),
        )
        chain = MarkovChain.from_config(config, **chain_kwargs)
        for index, entry in enumerate(data["contexts"]):
            # stored contexts are fully known, so a null is the value None
            context = [Known(_freeze(v)) for v in entry["context"]]
            if len(context) != config.order:
                raise InvalidSnapshot(
                    f"context #{index} has {len(context)} slots, "
                    f"order is {config.order}"
                )
            for element, weight in entry["outcomes"]:
                chain.train(context, _freeze(element), weight)
    except InvalidSnapshot:
        raise
    except MarkovError as e:
        raise InvalidSnapshot(f"snapshot rejected: {e}") from e
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidSnapshot(f"malformed snapshot entry: {e!r}") from e

    return chain


def dumps(chain: MarkovChain, **json_kwargs: Any) -> str:
    """Serialize a chain to JSON text. Elements must be JSON encodable."""
    return json.dumps(to_snapshot(chain), **json_kwargs)


def loads(text: str, **chain_kwargs: Any) -> MarkovChain:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidSnapshot(f"snapshot is not valid JSON: {e}") from e
    return from_snapshot(data, **chain_kwargs)


def save(chain: MarkovChain, path: Union[str, Path]) -> Path:
    """Write a chain snapshot to `path` atomically and return the path."""
    target = Path(path)
    tmp_path = target.with_suffix(target.suffix + ".tmp")
    tmp_path.write_text(dumps(chain, ensure_ascii=False), encoding="utf-8")
    tmp_path.replace(target)
    logger.info("saved %d context(s) to %s", len(chain), target)
    return target


def load(path: Union[str, Path], **chain_kwargs: Any) -> MarkovChain:
    source = Path(path)
    chain = loads(source.read_text(encoding="utf-8"), **chain_kwargs)
    logger.info("loaded %d context(s) from %s", len(chain), source)
    return chain

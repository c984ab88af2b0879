from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from ..errors import SnapshotDecodeError
from ..types import VectorDocument


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def document_to_dict(doc: VectorDocument) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": doc.id,
        "content": doc.content,
        "embedding": [float(x) for x in doc.embedding],
    }
    if doc.metadata is not None:
        payload["metadata"] = dict(doc.metadata)
    if doc.created_at is not None:
        payload["createdAt"] = format_timestamp(doc.created_at)
    return payload


def document_from_dict(raw: Mapping[str, Any]) -> VectorDocument:
    if not isinstance(raw, Mapping):
        raise SnapshotDecodeError(f"快照条目必须是对象: {type(raw).__name__}")
    try:
        created_raw = raw.get("createdAt")
        metadata = raw.get("metadata")
        if metadata is not None and not isinstance(metadata, Mapping):
            raise TypeError("metadata 必须是对象")
        return VectorDocument(
            id=str(raw["id"]),
            content=str(raw["content"]),
            embedding=[float(x) for x in raw["embedding"]],
            metadata=dict(metadata) if metadata is not None else None,
            created_at=parse_timestamp(created_raw) if created_raw is not None else None,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotDecodeError(f"无法解析快照条目: {e}") from e


def dumps_snapshot(docs: Iterable[VectorDocument]) -> str:
    return json.dumps([document_to_dict(d) for d in docs], ensure_ascii=False)


def loads_snapshot(data: str) -> list[VectorDocument]:
    try:
        raw = json.loads(data)
    except (TypeError, ValueError) as e:
        raise SnapshotDecodeError(f"快照不是合法的 JSON: {e}") from e
    if not isinstance(raw, list):
        raise SnapshotDecodeError("快照顶层必须是数组")
    return [document_from_dict(item) for item in raw]

"""In-memory object storage for local development and tests."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from backend.errors import NotFoundError, UpstreamError


@dataclass
class StoredObject:
    body: bytes
    content_type: str


class InMemoryObjectStorage:
    def __init__(self, base_url: str = "http://storage.local") -> None:
        self._base_url = base_url.rstrip("/")
        self._objects: Dict[Tuple[str, str], StoredObject] = {}

    def put_object(self, *, bucket: str, key: str, body: bytes, content_type: str) -> None:
        norm = key.lstrip("/")
        if (bucket, norm) in self._objects:
            # Uploads never overwrite (upsert=false upstream).
            raise UpstreamError("The resource already exists")
        self._objects[(bucket, norm)] = StoredObject(body=bytes(body), content_type=content_type)

    def public_url(self, *, bucket: str, key: str) -> str:
        return f"{self._base_url}/storage/v1/object/public/{bucket}/{key.lstrip('/')}"

    def delete_object(self, *, bucket: str, key: str) -> None:
        self._objects.pop((bucket, key.lstrip("/")), None)

    def get_object(self, *, bucket: str, key: str) -> StoredObject:
        obj: Optional[StoredObject] = self._objects.get((bucket, key.lstrip("/")))
        if obj is None:
            raise NotFoundError("object_not_found")
        return obj

    def exists(self, *, bucket: str, key: str) -> bool:
        return (bucket, key.lstrip("/")) in self._objects

    def keys(self, bucket: str) -> list[str]:
        return sorted(k for (b, k) in self._objects if b == bucket)


__all__ = ["InMemoryObjectStorage", "StoredObject"]

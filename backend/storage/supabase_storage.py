"""
Supabase-backed object storage adapter.

This adapter implements ObjectStorage using a provided Supabase client. It is
intentionally duck-typed to avoid a hard dependency during testing. The client
is expected to expose `.storage.from_(bucket)` which returns an object
offering:

- upload(path, body, file_options) -> Any
- get_public_url(path) -> str | { publicUrl | publicURL | public_url }
- remove([path]) -> Any

Security:
- The caller must ensure the client is initialized with the Service Role key.
- The proofs bucket is public by contract: learners and admins open proofs via
  their public URL.
"""
from __future__ import annotations

from typing import Any, Dict

from backend.errors import UpstreamError


class SupabaseStorageAdapter:
    """Storage adapter using a supabase client for Storage operations."""

    def __init__(self, client: Any):
        # Duck-typed supabase client, e.g., from `supabase import create_client(...)`.
        self._client = client

    # --- Helpers -----------------------------------------------------------------

    def _bucket(self, bucket: str) -> Any:
        """Return a bucket proxy from either supabase client or storage3 client.

        Supports two client shapes:
        - supabase.create_client(...): expose `.storage.from_(bucket)`
        - storage3 SyncStorageClient: expose `.from_(bucket)` directly
        """
        c = self._client
        storage = getattr(c, "storage", None)
        if storage is not None and hasattr(storage, "from_"):
            return storage.from_(bucket)
        if hasattr(c, "from_"):
            return c.from_(bucket)  # type: ignore[attr-defined]
        raise UpstreamError("invalid_supabase_client")

    @staticmethod
    def _first_key(d: Dict[str, Any], *keys: str) -> Any:
        for k in keys:
            if k in d and d[k] is not None:
                return d[k]
        return None

    @staticmethod
    def _norm_key(bucket: str, key: str) -> str:
        # Storage paths are relative to the bucket (storage3 prepends the bucket id)
        norm_key = key.lstrip("/")
        prefix = f"{bucket}/"
        if norm_key.startswith(prefix):
            norm_key = norm_key[len(prefix):]
        return norm_key

    # --- Protocol methods --------------------------------------------------------

    def put_object(self, *, bucket: str, key: str, body: bytes, content_type: str) -> None:
        """Upload a binary object to Supabase Storage.

        Behavior:
            - Normalizes the key relative to the bucket.
            - Never overwrites an existing object (``upsert: false``).
            - Passes content-type via options with both kebab and camel case to
              stay compatible across client versions.

        Raises:
            UpstreamError wrapping any client exception.
        """
        b = self._bucket(bucket)
        opts = {"content-type": content_type, "contentType": content_type, "upsert": "false"}
        try:
            b.upload(self._norm_key(bucket, key), body, opts)
        except Exception as exc:
            raise UpstreamError(f"upload failed: {getattr(exc, 'message', None) or exc}") from exc

    def public_url(self, *, bucket: str, key: str) -> str:
        b = self._bucket(bucket)
        res = b.get_public_url(self._norm_key(bucket, key))
        url = None
        if isinstance(res, str):
            url = res
        elif isinstance(res, dict):
            url = self._first_key(res, "publicUrl", "publicURL", "public_url")
            data = res.get("data") if "data" in res else None
            if url is None and isinstance(data, dict):
                url = self._first_key(data, "publicUrl", "publicURL", "public_url")
        if not url:
            raise UpstreamError("failed_to_resolve_public_url")
        # Some client versions append a bare "?" to public URLs.
        return str(url).rstrip("?")

    def delete_object(self, *, bucket: str, key: str) -> None:
        b = self._bucket(bucket)
        try:
            b.remove([self._norm_key(bucket, key)])
        except Exception as exc:
            raise UpstreamError(f"remove failed: {getattr(exc, 'message', None) or exc}") from exc


__all__ = ["SupabaseStorageAdapter"]

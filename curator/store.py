from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from config.settings import Settings, get_settings
from curator.core.local_store import LocalStore
from curator.errors import GalleryStoreError
from curator.models import Gallery, Memory


logger = logging.getLogger(__name__)

LOCAL_STORAGE_KEY = "meowseum_my_gallery_id"


def encode_value(value: Any) -> Dict[str, Any]:
    """Encode a Python value as a Firestore REST ``Value``."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(v) for v in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": encode_fields(value)}}
    raise TypeError(f"Cannot store value of type {type(value).__name__}")


def encode_fields(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {str(k): encode_value(v) for k, v in doc.items()}


def decode_value(field: Dict[str, Any]) -> Any:
    """Decode a Firestore REST ``Value`` back into plain Python."""
    if "stringValue" in field:
        return field["stringValue"]
    if "integerValue" in field:
        return int(field["integerValue"])
    if "doubleValue" in field:
        return float(field["doubleValue"])
    if "booleanValue" in field:
        return bool(field["booleanValue"])
    if "timestampValue" in field:
        return field["timestampValue"]
    if "nullValue" in field:
        return None
    if "arrayValue" in field:
        return [decode_value(v) for v in field["arrayValue"].get("values", [])]
    if "mapValue" in field:
        return decode_fields(field["mapValue"].get("fields", {}))
    return None


def decode_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: decode_value(v) for k, v in (fields or {}).items()}


class GalleryStore:
    """Saves finished galleries to Firestore and remembers the latest one.

    The id of the most recent gallery lives in the client's ``LocalStore``.
    Only one id is kept; saving a new gallery forgets the previous one.
    """

    def __init__(
        self,
        local_store: LocalStore,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.local_store = local_store
        self.settings = settings or get_settings()
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.firestore_timeout, transport=self._transport
        )

    def _params(self) -> Dict[str, str]:
        if self.settings.firestore_api_key:
            return {"key": self.settings.firestore_api_key}
        return {}

    def _collection_url(self) -> str:
        base_url = self.settings.firestore_base_url
        if not base_url:
            raise GalleryStoreError("FIRESTORE_PROJECT not configured")
        return f"{base_url}/{self.settings.gallery_collection}"

    async def save_gallery(self, memories: Sequence[Memory], client_marker: str = "") -> str:
        document = {
            "createdAt": int(time.time() * 1000),
            "memories": [m.model_dump(by_alias=True) for m in memories],
            "deviceAgent": client_marker,
        }
        url = self._collection_url()

        try:
            async with self._client() as client:
                response = await client.post(
                    url, params=self._params(), json={"fields": encode_fields(document)}
                )
                response.raise_for_status()
                data = response.json()
            gallery_id = data["name"].rsplit("/", 1)[-1]
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            logger.error("Error adding gallery document: %s", exc)
            raise GalleryStoreError(f"Saving gallery failed: {exc}") from exc

        self.local_store.set(LOCAL_STORAGE_KEY, gallery_id)
        logger.info("Gallery written with ID %s (%s memories)", gallery_id, len(memories))
        return gallery_id

    async def get_latest_gallery(self) -> Optional[Gallery]:
        gallery_id = self.local_store.get(LOCAL_STORAGE_KEY)
        if not gallery_id:
            return None

        try:
            url = f"{self._collection_url()}/{gallery_id}"
            async with self._client() as client:
                response = await client.get(url, params=self._params())
                if response.status_code == 404:
                    # Deleted remotely; forget it so the landing page stops offering it.
                    logger.info("Gallery %s no longer exists; clearing local id", gallery_id)
                    self.local_store.delete(LOCAL_STORAGE_KEY)
                    return None
                response.raise_for_status()
                data = response.json()
            return self._parse_gallery(gallery_id, data)
        except (GalleryStoreError, httpx.HTTPError, ValidationError, KeyError, ValueError) as exc:
            logger.error("Error fetching gallery %s: %s", gallery_id, exc)
            return None

    def has_saved_galleries(self) -> bool:
        return bool(self.local_store.get(LOCAL_STORAGE_KEY))

    @staticmethod
    def _parse_gallery(gallery_id: str, data: Dict[str, Any]) -> Gallery:
        fields = decode_fields(data.get("fields", {}))
        memories: List[Memory] = [
            Memory.model_validate(item) for item in fields.get("memories") or []
        ]
        return Gallery(
            id=gallery_id,
            createdAt=fields.get("createdAt") or 0,
            memories=memories,
            deviceAgent=fields.get("deviceAgent") or "",
        )

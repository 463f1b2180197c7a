from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here.
    """

    app_env: str = os.getenv("APP_ENV", "development")
    google_api_key: Optional[str] = os.getenv("GOOGLE_API_KEY")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")
    gemini_image_model: str = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")
    temperature: float = float(os.getenv("MODEL_TEMPERATURE", "0.7"))
    top_p: float = float(os.getenv("MODEL_TOP_P", "0.9"))
    generation_timeout: float = float(os.getenv("GENERATION_TIMEOUT", "90"))
    firestore_project: Optional[str] = os.getenv("FIRESTORE_PROJECT")
    firestore_database: str = os.getenv("FIRESTORE_DATABASE", "(default)")
    firestore_api_key: Optional[str] = os.getenv("FIRESTORE_API_KEY")
    firestore_timeout: float = float(os.getenv("FIRESTORE_TIMEOUT", "15"))
    gallery_collection: str = os.getenv("GALLERY_COLLECTION", "galleries")
    local_store_dir: Optional[str] = os.getenv("LOCAL_STORE_DIR")
    max_clients: int = int(os.getenv("MAX_CLIENTS", "1000"))

    @property
    def firestore_base_url(self) -> Optional[str]:
        if not self.firestore_project:
            return None
        return (
            "https://firestore.googleapis.com/v1/projects/"
            f"{self.firestore_project}/databases/{self.firestore_database}/documents"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

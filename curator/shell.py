from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Optional, Sequence

from curator.core.localization import questions_for
from curator.errors import InvalidTransitionError
from curator.gallery import GalleryPresenter
from curator.interview import InterviewFlowController, Step
from curator.models import DEFAULT_LANGUAGE, Language, Memory
from curator.store import GalleryStore


logger = logging.getLogger(__name__)


class AppMode(str, Enum):
    LANDING = "landing"
    INTERVIEW = "interview"
    GALLERY = "gallery"


class AppContext:
    """State shared by every screen of one client: language and history flag.

    Only ``toggle_language`` changes the language.
    """

    def __init__(self, language: Language = DEFAULT_LANGUAGE, has_history: bool = False):
        self._language: Language = language
        self.has_history = has_history

    @property
    def language(self) -> Language:
        return self._language

    def toggle_language(self) -> Language:
        self._language = "zh" if self._language == "en" else "en"
        return self._language


class SaveOutcome:
    """Result of the background save started when an interview finishes."""

    PENDING = "pending"
    SAVED = "saved"
    FAILED = "failed"

    def __init__(self, memories: Sequence[Memory]):
        self.memories = tuple(memories)
        self.status = self.PENDING
        self.gallery_id: Optional[str] = None
        self.error: Optional[str] = None
        self.task: Optional[asyncio.Task] = None

    def as_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "gallery_id": self.gallery_id, "error": self.error}


class Shell:
    def __init__(
        self,
        generator: Any,
        store: GalleryStore,
        context: Optional[AppContext] = None,
        client_marker: str = "",
        generation_timeout: Optional[float] = None,
    ):
        self.generator = generator
        self.store = store
        self.context = context or AppContext()
        self.client_marker = client_marker
        self.generation_timeout = generation_timeout

        self.mode = AppMode.LANDING
        self.interview: Optional[InterviewFlowController] = None
        self.gallery: Optional[GalleryPresenter] = None
        self.save: Optional[SaveOutcome] = None
        self.context.has_history = self.store.has_saved_galleries()

    def _require(self, mode: AppMode, operation: str) -> None:
        if self.mode is not mode:
            raise InvalidTransitionError(operation, self.mode.value)

    def toggle_language(self) -> Language:
        language = self.context.toggle_language()
        if self.gallery is not None:
            self.gallery.language = language
        return language

    def start_interview(self) -> InterviewFlowController:
        self._require(AppMode.LANDING, "start an interview")
        language = self.context.language
        self.interview = InterviewFlowController(
            questions_for(language),
            self.generator,
            language=language,
            timeout=self.generation_timeout,
        )
        self.mode = AppMode.INTERVIEW
        return self.interview

    async def view_my_collection(self) -> bool:
        self._require(AppMode.LANDING, "open the saved collection")
        gallery = await self.store.get_latest_gallery()
        # A saved gallery with no memories has nothing to show; treat it as absent
        # but keep the id, since the document itself still exists.
        if gallery is None or not gallery.memories:
            self.context.has_history = self.store.has_saved_galleries()
            return False
        self.gallery = GalleryPresenter(gallery.memories, self.context.language)
        self.mode = AppMode.GALLERY
        return True

    def complete_interview(self) -> GalleryPresenter:
        """Show the finished gallery now and save it in the background."""
        self._require(AppMode.INTERVIEW, "finish the interview")
        if self.interview is None or self.interview.step is not Step.COMPLETE:
            step = self.interview.step.value if self.interview else "none"
            raise InvalidTransitionError("finish the interview", step)

        memories = self.interview.memories
        self.gallery = GalleryPresenter(memories, self.context.language)
        self.interview = None
        self.mode = AppMode.GALLERY
        self._schedule_save(SaveOutcome(memories))
        return self.gallery

    def retry_save(self) -> SaveOutcome:
        if self.save is None or self.save.status != SaveOutcome.FAILED:
            raise InvalidTransitionError(
                "retry saving", self.save.status if self.save else "none"
            )
        self._schedule_save(SaveOutcome(self.save.memories))
        return self.save

    def _schedule_save(self, outcome: SaveOutcome) -> None:
        self.save = outcome
        outcome.task = asyncio.get_running_loop().create_task(self._persist(outcome))

    async def _persist(self, outcome: SaveOutcome) -> None:
        try:
            outcome.gallery_id = await self.store.save_gallery(
                outcome.memories, self.client_marker
            )
        except Exception as exc:
            logger.error("Saving gallery failed: %s", exc)
            outcome.status = SaveOutcome.FAILED
            outcome.error = str(exc)
            return
        outcome.status = SaveOutcome.SAVED
        self.context.has_history = True

    def restart(self) -> None:
        self._require(AppMode.GALLERY, "restart")
        self.gallery = None
        self.interview = None
        self.mode = AppMode.LANDING
        self.context.has_history = self.store.has_saved_galleries()

    def release(self) -> None:
        """Drop the in-progress interview and any gallery held for display.

        A save already running keeps its own copy of the memories.
        """
        self.gallery = None
        self.interview = None
        self.mode = AppMode.LANDING

    def state(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "language": self.context.language,
            "has_history": self.context.has_history,
            "save": self.save.as_dict() if self.save else None,
        }

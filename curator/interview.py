from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from curator.core.localization import text
from curator.core.prompt import painting_prompt
from curator.errors import (
    EmptySubmissionError,
    GenerationError,
    InvalidTransitionError,
)
from curator.generation import parse_data_url, to_data_url
from curator.models import CuratorResponse, Memory


logger = logging.getLogger(__name__)


def _collect_late_error(task: asyncio.Future) -> None:
    # The sibling of a failed generation call is never awaited; read its
    # exception so asyncio does not report it as unretrieved.
    if not task.cancelled():
        task.exception()


class Step(str, Enum):
    INPUT = "input"
    GENERATING = "generating"
    RESULT = "result"
    COMPLETE = "complete"


class InterviewFlowController:
    """Walks one user through the question list, one painting per answer.

    ``generator`` is anything exposing the two async generation calls of
    ``ContentGenerationClient``.
    """

    def __init__(
        self,
        questions: Sequence[str],
        generator: Any,
        language: str = "en",
        timeout: Optional[float] = None,
    ):
        if not questions:
            raise ValueError("An interview needs at least one question")
        self.questions: Tuple[str, ...] = tuple(questions)
        self.generator = generator
        self.language = language
        self.timeout = timeout

        self.index = 0
        self.step = Step.INPUT
        self.answer = ""
        self.image: Optional[str] = None
        self.comment = ""
        self.title = ""
        self.painting: Optional[str] = None
        self.notice: Optional[str] = None
        self._memories: List[Memory] = []
        self._last_timestamp = 0

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def progress(self) -> float:
        return self.index / self.total

    @property
    def current_question(self) -> str:
        return self.questions[self.index]

    @property
    def is_last_question(self) -> bool:
        return self.index + 1 >= self.total

    @property
    def memories(self) -> Tuple[Memory, ...]:
        return tuple(self._memories)

    def _require(self, step: Step, operation: str) -> None:
        if self.step is not step:
            raise InvalidTransitionError(operation, self.step.value)

    def set_answer(self, answer: str) -> None:
        self._require(Step.INPUT, "edit the answer")
        self.answer = answer or ""

    def attach_image(self, data_url: str) -> None:
        """Keep ``data_url`` as the reference photo, replacing any earlier one."""
        self._require(Step.INPUT, "attach an image")
        # Validate now so a broken upload never reaches the painter.
        mime_type, data = parse_data_url(data_url)
        self.image = to_data_url(data, mime_type)

    def attach_image_bytes(self, data: bytes, mime_type: str) -> None:
        self._require(Step.INPUT, "attach an image")
        if not mime_type.lower().startswith("image/"):
            raise ValueError(f"Expected an image, got '{mime_type}'")
        if not data:
            raise ValueError("Image is empty")
        self.image = to_data_url(data, mime_type.lower())

    def clear_image(self) -> None:
        self._require(Step.INPUT, "clear the image")
        self.image = None

    def can_submit(self) -> bool:
        return self.step is Step.INPUT and bool(self.answer.strip() or self.image)

    def _next_timestamp(self) -> int:
        now = int(time.time() * 1000)
        self._last_timestamp = max(now, self._last_timestamp + 1)
        return self._last_timestamp

    async def _bounded(self, coro):
        if self.timeout is None:
            return await coro
        return await asyncio.wait_for(coro, timeout=self.timeout)

    async def submit(self) -> bool:
        """Generate the curator note and painting for the current answer.

        Returns True when a Memory was recorded. On failure the controller is
        back in ``Step.INPUT`` with the answer and image untouched and
        ``notice`` set.
        """
        self._require(Step.INPUT, "submit")
        if not self.answer.strip() and not self.image:
            raise EmptySubmissionError("Write an answer or attach an image first")

        self.step = Step.GENERATING
        self.notice = None
        question = self.current_question
        answer = self.answer
        logger.info(
            "Generating for question %s/%s: answer_len=%s image=%s",
            self.index + 1,
            self.total,
            len(answer),
            self.image is not None,
        )

        curator_task = asyncio.ensure_future(
            self._bounded(self.generator.generate_curator_response(answer, self.language))
        )
        painting_task = asyncio.ensure_future(
            self._bounded(
                self.generator.generate_painting(painting_prompt(question, answer), self.image)
            )
        )
        for task in (curator_task, painting_task):
            task.add_done_callback(_collect_late_error)

        try:
            response, painting = await asyncio.gather(curator_task, painting_task)
            if painting is None:
                raise GenerationError("No painting was returned")
            if not isinstance(response, CuratorResponse):
                raise GenerationError("Curator response is malformed")
        except Exception as exc:
            if isinstance(exc, (GenerationError, asyncio.TimeoutError)):
                logger.warning("Generation failed for question %s: %r", self.index + 1, exc)
            else:
                logger.exception("Unexpected generation error for question %s", self.index + 1)
            self.step = Step.INPUT
            self.notice = text(self.language, "generationFailed")
            return False

        timestamp = self._next_timestamp()
        self._memories.append(
            Memory(
                id=str(timestamp),
                question=question,
                answer=answer,
                paintingUrl=painting,
                title=response.title,
                timestamp=timestamp,
            )
        )
        self.comment = response.comment
        self.title = response.title
        self.painting = painting
        self.step = Step.RESULT
        return True

    def advance(self) -> Optional[Tuple[Memory, ...]]:
        """Move past the shown result.

        Returns the finished memories after the last question, otherwise None.
        """
        self._require(Step.RESULT, "advance")
        self.answer = ""
        self.image = None
        self.comment = ""
        self.title = ""
        self.painting = None
        self.notice = None

        if self.index + 1 < self.total:
            self.index += 1
            self.step = Step.INPUT
            return None

        self.step = Step.COMPLETE
        logger.info("Interview complete with %s memories", len(self._memories))
        return self.memories

    def snapshot(self) -> Dict[str, Any]:
        return {
            "step": self.step.value,
            "index": self.index,
            "total": self.total,
            "progress": self.progress,
            "question": self.current_question,
            "is_last_question": self.is_last_question,
            "answer": self.answer,
            "image": self.image,
            "comment": self.comment,
            "title": self.title,
            "painting": self.painting,
            "notice": self.notice,
            "can_submit": self.can_submit(),
            "memory_count": len(self._memories),
        }

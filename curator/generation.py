from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Optional, Tuple

from google import genai
from google.genai import types
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import ValidationError

from config.settings import Settings, get_settings
from curator.core.prompt import (
    PAINTING_ASPECT_RATIO,
    PAINTING_DIRECTIVE,
    SYSTEM_PROMPT,
    curator_prompt,
)
from curator.errors import GenerationError
from curator.models import CuratorResponse


logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME = "image/jpeg"


def parse_data_url(value: str) -> Tuple[str, bytes]:
    """Split ``data:<mime>;base64,<payload>`` into its mime type and raw bytes.

    A bare base64 string is accepted too and assumed to be a JPEG. Anything
    that is not a non-empty image raises ``ValueError``.
    """
    mime_type = DEFAULT_IMAGE_MIME
    payload = value.strip()
    if payload.startswith("data:"):
        header, _, payload = payload.partition(",")
        declared = header[len("data:"):].split(";", 1)[0]
        if declared:
            mime_type = declared.lower()
    if not mime_type.startswith("image/"):
        raise ValueError(f"Expected an image, got '{mime_type}'")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Image is not valid base64 data") from exc
    if not data:
        raise ValueError("Image is empty")
    return mime_type, data


def to_data_url(data: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def build_curator_llm(settings: Optional[Settings] = None) -> Runnable:
    settings = settings or get_settings()
    if not settings.google_api_key:
        raise RuntimeError(
            "GOOGLE_API_KEY not set. Please configure it in environment or .env"
        )

    llm = ChatGoogleGenerativeAI(
        model=settings.gemini_model,
        google_api_key=settings.google_api_key,
        temperature=settings.temperature,
        top_p=settings.top_p,
    )
    return llm.with_structured_output(CuratorResponse)


def build_genai_client(settings: Optional[Settings] = None) -> genai.Client:
    settings = settings or get_settings()
    if not settings.google_api_key:
        raise RuntimeError(
            "GOOGLE_API_KEY not set. Please configure it in environment or .env"
        )
    return genai.Client(api_key=settings.google_api_key)


def _first_inline_image(response: Any) -> Optional[Tuple[bytes, str]]:
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                return inline.data, inline.mime_type or "image/png"
    return None


class ContentGenerationClient:
    """Talks to Gemini for the two per-answer artifacts.

    Both calls are stateless. Anything that goes wrong surfaces as
    ``GenerationError`` so the interview decides what the user sees.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        curator_llm: Optional[Runnable] = None,
        genai_client: Optional[Any] = None,
    ):
        self.settings = settings or get_settings()
        self._curator_llm = curator_llm
        self._genai_client = genai_client
        self._curator_prompt = ChatPromptTemplate.from_messages(
            [
                ("system", SYSTEM_PROMPT),
                ("human", "{input}"),
            ]
        )

    @property
    def curator_llm(self) -> Runnable:
        if self._curator_llm is None:
            self._curator_llm = build_curator_llm(self.settings)
        return self._curator_llm

    @property
    def genai_client(self) -> Any:
        if self._genai_client is None:
            self._genai_client = build_genai_client(self.settings)
        return self._genai_client

    async def generate_curator_response(self, answer_text: str, language: str) -> CuratorResponse:
        chain = self._curator_prompt | self.curator_llm
        try:
            result = await chain.ainvoke({"input": curator_prompt(answer_text, language)})
        except Exception as exc:
            logger.warning("Curator response failed: %s", exc)
            raise GenerationError(f"Curator response failed: {exc}") from exc

        if isinstance(result, dict):
            try:
                result = CuratorResponse.model_validate(result)
            except ValidationError as exc:
                raise GenerationError(f"Curator response is missing fields: {exc}") from exc
        if not isinstance(result, CuratorResponse):
            raise GenerationError("Curator response could not be parsed")

        logger.info(
            "Curator responded: lang=%s title=%r comment_len=%s",
            language,
            result.title,
            len(result.comment),
        )
        return result

    async def generate_painting(
        self, prompt_text: str, inline_image: Optional[str] = None
    ) -> Optional[str]:
        contents: list = [PAINTING_DIRECTIVE.format(memory=prompt_text)]
        if inline_image:
            try:
                mime_type, data = parse_data_url(inline_image)
            except ValueError as exc:
                raise GenerationError(str(exc)) from exc
            # Reference image goes first so the model reads it before the directive.
            contents.insert(0, types.Part.from_bytes(data=data, mime_type=mime_type))

        try:
            response = await self.genai_client.aio.models.generate_content(
                model=self.settings.gemini_image_model,
                contents=contents,
                config=types.GenerateContentConfig(
                    response_modalities=["IMAGE"],
                    image_config=types.ImageConfig(aspect_ratio=PAINTING_ASPECT_RATIO),
                ),
            )
        except Exception as exc:
            logger.warning("Painting generation failed: %s", exc)
            raise GenerationError(f"Painting generation failed: {exc}") from exc

        found = _first_inline_image(response)
        if found is None:
            logger.info("Painting response contained no image parts")
            return None
        data, mime_type = found
        logger.info("Painting generated: mime=%s bytes=%s", mime_type, len(data))
        return to_data_url(data, mime_type)

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from pydantic import BaseModel, Field

from app.sessions import ShellRegistry
from config.settings import get_settings
from curator.core.localization import questions_for, texts_for
from curator.errors import EmptySubmissionError, InvalidTransitionError
from curator.models import Language
from curator.shell import Shell


logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("meowseum")

app = FastAPI(title="Meowseum Memory Gallery", version="1.0.0")

# CORS: allow local frontend during development
settings = get_settings()
if settings.app_env.lower() in {"dev", "development", "local"}:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@lru_cache(maxsize=1)
def get_registry() -> ShellRegistry:
    return ShellRegistry(get_settings())


class ClientRequest(BaseModel):
    client_id: str = Field(..., description="Unique identifier for the browser")


class AnswerRequest(ClientRequest):
    answer: Optional[str] = Field(None, description="Answer text for the current question")
    image: Optional[str] = Field(
        None, description="Reference photo as a data URI; replaces any earlier one"
    )


class SelectRequest(ClientRequest):
    memory_id: str


@app.exception_handler(EmptySubmissionError)
async def _empty_submission(request: Request, exc: EmptySubmissionError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(InvalidTransitionError)
async def _invalid_transition(request: Request, exc: InvalidTransitionError):
    return JSONResponse(status_code=409, content={"detail": str(exc), "step": exc.step})


def _shell(client_id: str, request: Request, registry: ShellRegistry) -> Shell:
    return registry.get(client_id, request.headers.get("user-agent", ""))


def _interview_state(shell: Shell) -> Dict[str, Any]:
    if shell.interview is None:
        raise HTTPException(status_code=409, detail="No interview in progress")
    return shell.interview.snapshot()


def _gallery_state(shell: Shell) -> Dict[str, Any]:
    if shell.gallery is None:
        raise HTTPException(status_code=409, detail="No gallery is open")
    selected = shell.gallery.selected
    return {
        "order": shell.gallery.order,
        "cards": shell.gallery.cards(),
        "selected": selected.model_dump(by_alias=True) if selected else None,
        "shell": shell.state(),
    }


def _apply_answer(shell: Shell, req: AnswerRequest) -> None:
    interview = shell.interview
    if interview is None:
        raise HTTPException(status_code=409, detail="No interview in progress")
    if req.answer is not None:
        interview.set_answer(req.answer)
    if req.image:
        try:
            interview.attach_image(req.image)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/api/texts")
def texts(lang: Language = "en") -> Dict[str, Any]:
    return {"lang": lang, "texts": texts_for(lang), "questions": questions_for(lang)}


@app.get("/api/shell")
def shell_state(client_id: str, request: Request, registry: ShellRegistry = Depends(get_registry)):
    return _shell(client_id, request, registry).state()


@app.post("/api/language/toggle")
def toggle_language(req: ClientRequest, request: Request, registry: ShellRegistry = Depends(get_registry)):
    shell = _shell(req.client_id, request, registry)
    language = shell.toggle_language()
    logger.info("Language toggled: client_id=%s lang=%s", req.client_id, language)
    return shell.state()


@app.post("/api/interview/start")
def start_interview(req: ClientRequest, request: Request, registry: ShellRegistry = Depends(get_registry)):
    shell = _shell(req.client_id, request, registry)
    shell.start_interview()
    logger.info("Interview started: client_id=%s lang=%s", req.client_id, shell.context.language)
    return _interview_state(shell)


@app.get("/api/interview")
def interview_state(client_id: str, request: Request, registry: ShellRegistry = Depends(get_registry)):
    return _interview_state(_shell(client_id, request, registry))


@app.post("/api/interview/answer")
def set_answer(req: AnswerRequest, request: Request, registry: ShellRegistry = Depends(get_registry)):
    shell = _shell(req.client_id, request, registry)
    _apply_answer(shell, req)
    return _interview_state(shell)


@app.delete("/api/interview/image")
def clear_image(client_id: str, request: Request, registry: ShellRegistry = Depends(get_registry)):
    shell = _shell(client_id, request, registry)
    if shell.interview is None:
        raise HTTPException(status_code=409, detail="No interview in progress")
    shell.interview.clear_image()
    return _interview_state(shell)


@app.post("/api/interview/submit")
async def submit_answer(req: AnswerRequest, request: Request, registry: ShellRegistry = Depends(get_registry)):
    if not registry.settings.google_api_key:
        raise HTTPException(
            status_code=500,
            detail="Missing GOOGLE_API_KEY in environment or .env",
        )
    shell = _shell(req.client_id, request, registry)
    _apply_answer(shell, req)
    ok = await shell.interview.submit()
    if not ok:
        logger.warning("Submission failed: client_id=%s index=%s", req.client_id, shell.interview.index)
    return _interview_state(shell)


@app.post("/api/interview/advance")
async def advance(req: ClientRequest, request: Request, registry: ShellRegistry = Depends(get_registry)):
    shell = _shell(req.client_id, request, registry)
    if shell.interview is None:
        raise HTTPException(status_code=409, detail="No interview in progress")
    finished = shell.interview.advance()
    if finished is None:
        return {"complete": False, "interview": shell.interview.snapshot()}

    shell.complete_interview()
    logger.info("Gallery opened for client_id=%s with %s memories", req.client_id, len(finished))
    return {"complete": True, "gallery": _gallery_state(shell)}


@app.post("/api/gallery/mine")
async def view_my_collection(req: ClientRequest, request: Request, registry: ShellRegistry = Depends(get_registry)):
    shell = _shell(req.client_id, request, registry)
    found = await shell.view_my_collection()
    if not found:
        return {"found": False, "shell": shell.state()}
    return {"found": True, "gallery": _gallery_state(shell)}


@app.get("/api/gallery")
def gallery(
    client_id: str,
    request: Request,
    order: Optional[str] = None,
    registry: ShellRegistry = Depends(get_registry),
):
    shell = _shell(client_id, request, registry)
    if order is not None and shell.gallery is not None:
        try:
            shell.gallery.set_order(order)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
    return _gallery_state(shell)


@app.post("/api/gallery/select")
def select_memory(req: SelectRequest, request: Request, registry: ShellRegistry = Depends(get_registry)):
    shell = _shell(req.client_id, request, registry)
    if shell.gallery is None:
        raise HTTPException(status_code=409, detail="No gallery is open")
    try:
        shell.gallery.select(req.memory_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown memory '{req.memory_id}'")
    return _gallery_state(shell)


@app.delete("/api/gallery/select")
def close_memory(client_id: str, request: Request, registry: ShellRegistry = Depends(get_registry)):
    shell = _shell(client_id, request, registry)
    if shell.gallery is None:
        raise HTTPException(status_code=409, detail="No gallery is open")
    shell.gallery.close()
    return _gallery_state(shell)


@app.post("/api/gallery/save/retry")
async def retry_save(req: ClientRequest, request: Request, registry: ShellRegistry = Depends(get_registry)):
    shell = _shell(req.client_id, request, registry)
    shell.retry_save()
    logger.info("Retrying gallery save for client_id=%s", req.client_id)
    return shell.state()


@app.post("/api/restart")
def restart(req: ClientRequest, request: Request, registry: ShellRegistry = Depends(get_registry)):
    shell = _shell(req.client_id, request, registry)
    shell.restart()
    return shell.state()

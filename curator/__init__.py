from curator.generation import ContentGenerationClient
from curator.interview import InterviewFlowController, Step
from curator.models import CuratorResponse, Gallery, Memory
from curator.shell import AppContext, AppMode, Shell
from curator.store import GalleryStore

__all__ = [
    "AppContext",
    "AppMode",
    "ContentGenerationClient",
    "CuratorResponse",
    "Gallery",
    "GalleryStore",
    "InterviewFlowController",
    "Memory",
    "Shell",
    "Step",
]

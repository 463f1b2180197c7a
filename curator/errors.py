from __future__ import annotations


class CuratorError(Exception):
    """Base class for every error raised by the gallery domain."""


class GenerationError(CuratorError):
    """A Gemini call failed or returned something we cannot use."""


class GalleryStoreError(CuratorError):
    """Persisting a gallery to Firestore failed."""


class InterviewError(CuratorError):
    pass


class EmptySubmissionError(InterviewError):
    """Raised when an answer is submitted with no text and no image."""


class InvalidTransitionError(InterviewError):
    """Raised when an interview operation is not allowed in the current step."""

    def __init__(self, operation: str, step: str):
        super().__init__(f"Cannot {operation} while interview is in step '{step}'")
        self.operation = operation
        self.step = step

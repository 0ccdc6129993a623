# utils/state.py
"""
View state for the identifier page.

State is an immutable ViewState; every change goes through
transition(state, event), which returns the next state.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from plantid.utils.image_encoder import UploadedImage
from plantid.utils.response_parser import PlantIdentification

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    EMPTY = "empty"
    IDENTIFYING = "identifying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ViewState:
    phase: Phase = Phase.EMPTY
    image: Optional[UploadedImage] = None
    preview_uri: Optional[str] = None
    attempt_id: Optional[str] = None
    result: Optional[PlantIdentification] = None
    error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.phase is Phase.IDENTIFYING

    @property
    def can_retry(self) -> bool:
        return self.phase is Phase.FAILED and self.image is not None


# ======================================================
# EVENTS
# ======================================================
@dataclass(frozen=True)
class ImageSelected:
    image: Optional[UploadedImage]
    attempt_id: str


@dataclass(frozen=True)
class PreviewReady:
    attempt_id: str
    preview_uri: str


@dataclass(frozen=True)
class RetryRequested:
    attempt_id: str


@dataclass(frozen=True)
class IdentificationSucceeded:
    attempt_id: str
    result: PlantIdentification


@dataclass(frozen=True)
class IdentificationFailed:
    attempt_id: str
    message: str


@dataclass(frozen=True)
class ResetRequested:
    pass


EMPTY_STATE = ViewState()


def transition(state: ViewState, event) -> ViewState:
    if isinstance(event, ResetRequested):
        return EMPTY_STATE

    if isinstance(event, ImageSelected):
        # A new selection supersedes whatever was in flight.
        return ViewState(
            phase=Phase.IDENTIFYING,
            image=event.image,
            attempt_id=event.attempt_id,
        )

    if isinstance(event, RetryRequested):
        if not state.can_retry:
            logger.debug("Ignoring retry in phase %s", state.phase.value)
            return state
        return replace(
            state,
            phase=Phase.IDENTIFYING,
            attempt_id=event.attempt_id,
            result=None,
            error=None,
        )

    if isinstance(event, (PreviewReady, IdentificationSucceeded, IdentificationFailed)):
        if state.attempt_id is None or event.attempt_id != state.attempt_id:
            logger.debug("Ignoring stale %s for attempt %s", type(event).__name__, event.attempt_id)
            return state

        if isinstance(event, PreviewReady):
            return replace(state, preview_uri=event.preview_uri)
        if state.phase is not Phase.IDENTIFYING:
            return state
        if isinstance(event, IdentificationSucceeded):
            return replace(state, phase=Phase.SUCCEEDED, result=event.result, error=None)
        return replace(state, phase=Phase.FAILED, result=None, error=event.message)

    raise TypeError(f"Unknown event: {event!r}")

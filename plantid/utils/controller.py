# utils/controller.py
import uuid
import logging

from plantid.utils.errors import EncodingError, PlantIdError
from plantid.utils.image_encoder import UploadedImage, encode_image
from plantid.utils.prompt_builder import build_identification_request
from plantid.utils.response_parser import NotIdentified, parse_identification
from plantid.utils.state import (
    EMPTY_STATE,
    IdentificationFailed,
    IdentificationSucceeded,
    ImageSelected,
    PreviewReady,
    ResetRequested,
    RetryRequested,
    ViewState,
    transition,
)

logger = logging.getLogger(__name__)


def _new_attempt_id() -> str:
    return uuid.uuid4().hex


class IdentificationController:
    """
    Drives one identification attempt at a time:
    encode -> build request -> send -> parse, dispatching each outcome
    to the state reducer.
    """

    def __init__(self, client, state: ViewState = EMPTY_STATE):
        self.client = client
        self.state = state

    def dispatch(self, event) -> ViewState:
        self.state = transition(self.state, event)
        return self.state

    def select_upload(self, uploaded_file) -> ViewState:
        """Read a Streamlit upload and identify it; an unreadable file fails the attempt."""
        attempt_id = _new_attempt_id()
        try:
            image = UploadedImage.from_upload(uploaded_file)
        except EncodingError as e:
            logger.error("Could not read upload: %s", e)
            self.dispatch(ImageSelected(image=None, attempt_id=attempt_id))
            return self.dispatch(IdentificationFailed(attempt_id=attempt_id, message=f"Failed to identify plant: {e}"))

        self.dispatch(ImageSelected(image=image, attempt_id=attempt_id))
        return self._identify(attempt_id, image)

    def select_image(self, image: UploadedImage) -> ViewState:
        attempt_id = _new_attempt_id()
        self.dispatch(ImageSelected(image=image, attempt_id=attempt_id))
        return self._identify(attempt_id, image)

    def retry(self) -> ViewState:
        if not self.state.can_retry:
            return self.state
        attempt_id = _new_attempt_id()
        self.dispatch(RetryRequested(attempt_id=attempt_id))
        return self._identify(attempt_id, self.state.image)

    def reset(self) -> ViewState:
        return self.dispatch(ResetRequested())

    def _identify(self, attempt_id: str, image: UploadedImage) -> ViewState:
        logger.info("Identifying %s (type=%s, size=%s bytes)", image.name, image.mime_type, image.size)
        try:
            encoded = encode_image(image)
            self.dispatch(PreviewReady(attempt_id=attempt_id, preview_uri=encoded.preview_uri))
            request = build_identification_request(encoded)
            completion = self.client.generate(request)
            outcome = parse_identification(completion)
        except PlantIdError as e:
            logger.error("Error identifying plant: %s", e)
            return self.dispatch(IdentificationFailed(attempt_id=attempt_id, message=f"Failed to identify plant: {e}"))

        if isinstance(outcome, NotIdentified):
            logger.info("Model could not identify the plant: %s", outcome.message)
            return self.dispatch(IdentificationFailed(attempt_id=attempt_id, message=outcome.message))

        logger.info("Identified %s (%s)", outcome.name, outcome.scientific_name)
        return self.dispatch(IdentificationSucceeded(attempt_id=attempt_id, result=outcome))

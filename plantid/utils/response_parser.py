# utils/response_parser.py
import re
import json
import math
import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from plantid.utils.errors import IncompleteDataError, MalformedResponseError

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json\n?", re.IGNORECASE)
_PLAIN_FENCE = re.compile(r"```\n?")
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")

_NON_TOXIC_MARKERS = {"null", "none", "n/a", "non-toxic", "nontoxic"}


def _clean_text(value):
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return value


class CareGuide(BaseModel):
    light: Optional[str] = None
    water: Optional[str] = None
    humidity: Optional[str] = None
    temperature: Optional[str] = None
    soil: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _normalize(cls, value):
        return _clean_text(value)

    def items(self):
        """(label, value) pairs for the fields the model filled in."""
        labels = [
            ("Light", self.light),
            ("Water", self.water),
            ("Humidity", self.humidity),
            ("Temperature", self.temperature),
            ("Soil", self.soil),
        ]
        return [(label, value) for label, value in labels if value]


class PlantIdentification(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    common_names: List[str] = Field(default_factory=list, alias="commonNames")
    scientific_name: str = Field(alias="scientificName")
    family: Optional[str] = None
    description: Optional[str] = None
    care: Optional[CareGuide] = None
    growth_rate: Optional[str] = Field(default=None, alias="growthRate")
    toxicity: Optional[str] = None
    confidence: Optional[int] = None

    @field_validator("name", "scientific_name", "family", "description", "growth_rate", mode="before")
    @classmethod
    def _normalize(cls, value):
        return _clean_text(value)

    @field_validator("care", mode="before")
    @classmethod
    def _care(cls, value):
        return value if isinstance(value, dict) else None

    @field_validator("common_names", mode="before")
    @classmethod
    def _listify_names(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return value
        names = [_clean_text(v) for v in value]
        return [n for n in names if isinstance(n, str) and n]

    @field_validator("toxicity", mode="before")
    @classmethod
    def _toxicity(cls, value):
        value = _clean_text(value)
        if isinstance(value, str) and value.lower() in _NON_TOXIC_MARKERS:
            return None
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, value):
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str):
            match = _NUMBER.search(value)
            if not match:
                return None
            value = float(match.group(0))
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            return None
        return max(0, min(100, int(round(value))))

    @property
    def is_toxic(self) -> bool:
        return bool(self.toxicity)

    def to_dict(self):
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class NotIdentified:
    """The model looked at the image and declined to name a plant."""

    message: str


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = _JSON_FENCE.sub("", cleaned)
    cleaned = _PLAIN_FENCE.sub("", cleaned)
    return cleaned.strip()


def parse_identification(text: str):
    """
    Decode a completion into a PlantIdentification, or a NotIdentified
    outcome when the model answered with {"error": ...}.

    Raises MalformedResponseError when the text is not a JSON object and
    IncompleteDataError when name or scientificName is missing.
    """
    cleaned = strip_code_fences(text or "")
    logger.debug("Cleaned response: %s", cleaned)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse completion as JSON: %s", e)
        raise MalformedResponseError("Failed to parse API response. The response may not be valid JSON.") from e

    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Failed to parse API response. Expected a JSON object, got {type(data).__name__}."
        )

    if data.get("error"):
        return NotIdentified(message=str(data["error"]).strip())

    for key in ("name", "scientificName"):
        if not _clean_text(data.get(key)):
            raise IncompleteDataError("Incomplete plant data received from API")

    try:
        return PlantIdentification.model_validate(data)
    except ValidationError as e:
        logger.warning("Plant data failed validation: %s", e)
        raise MalformedResponseError(
            f"Plant data did not match the expected format ({e.error_count()} invalid field(s))."
        ) from e

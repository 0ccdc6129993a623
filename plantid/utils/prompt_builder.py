# utils/prompt_builder.py
from dataclasses import dataclass

from plantid.utils.image_encoder import EncodedImage

NOT_IDENTIFIED_MESSAGE = "Could not identify plant. Please upload a clearer image of a plant."

PLANT_IDENTIFICATION_PROMPT = f"""Identify this plant and provide detailed information in the following JSON format (respond ONLY with valid JSON, no markdown or additional text):
{{
  "name": "common plant name",
  "commonNames": ["alternative name 1", "alternative name 2"],
  "scientificName": "Scientific name",
  "family": "Plant family",
  "description": "Detailed description of the plant (2-3 sentences)",
  "care": {{
    "light": "Light requirements",
    "water": "Watering instructions",
    "humidity": "Humidity level needed",
    "temperature": "Temperature range",
    "soil": "Soil type needed"
  }},
  "growthRate": "Growth rate",
  "toxicity": "Toxicity information or null if non-toxic",
  "confidence": 85
}}

If you cannot identify the plant or if the image doesn't contain a clear plant, respond with:
{{
  "error": "{NOT_IDENTIFIED_MESSAGE}"
}}"""


@dataclass(frozen=True)
class IdentificationRequest:
    image_data: str
    mime_type: str
    instruction: str = PLANT_IDENTIFICATION_PROMPT

    def contents(self):
        return [
            {
                "parts": [
                    {"text": self.instruction},
                    {
                        "inline_data": {
                            "mime_type": self.mime_type,
                            "data": self.image_data,
                        }
                    },
                ]
            }
        ]


def build_identification_request(encoded: EncodedImage) -> IdentificationRequest:
    return IdentificationRequest(image_data=encoded.data, mime_type=encoded.mime_type)

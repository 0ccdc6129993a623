# utils/mock_api_client.py
import json

from plantid.utils.prompt_builder import NOT_IDENTIFIED_MESSAGE

# -----------------------
# Canned completions
# -----------------------

MONSTERA = {
    "name": "Monstera Deliciosa",
    "commonNames": ["Swiss Cheese Plant", "Split-leaf Philodendron"],
    "scientificName": "Monstera deliciosa",
    "family": "Araceae",
    "description": (
        "A tropical climbing plant native to southern Mexico and Central America. "
        "Known for its large, glossy leaves with natural splits and holes."
    ),
    "care": {
        "light": "Bright indirect light, tolerates some shade",
        "water": "Water when the top 2-3 cm of soil is dry",
        "humidity": "Prefers 60-80% humidity",
        "temperature": "18-29°C (65-85°F)",
        "soil": "Chunky, well-draining aroid mix",
    },
    "growthRate": "Fast",
    "toxicity": "Toxic to cats and dogs if ingested; causes oral irritation.",
    "confidence": 92,
}

NOT_A_PLANT = {"error": NOT_IDENTIFIED_MESSAGE}


def fenced(payload) -> str:
    """Wrap a payload the way Gemini often does despite being told not to."""
    return "```json\n" + json.dumps(payload, indent=2, ensure_ascii=False) + "\n```"


class MockGeminiClient:
    """
    Offline stand-in for GeminiClient.
    Returns the queued completions in order, then keeps repeating the last one.
    """

    def __init__(self, completions=None):
        self.completions = list(completions) if completions else [fenced(MONSTERA)]
        self.requests = []

    def generate(self, request):
        self.requests.append(request)
        index = min(len(self.requests), len(self.completions)) - 1
        completion = self.completions[index]
        if isinstance(completion, Exception):
            raise completion
        return completion

import sys
import json
from pathlib import Path

import streamlit as st

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from plantid.utils.api_client import GENERATION_CONFIG
from plantid.utils.prompt_builder import PLANT_IDENTIFICATION_PROMPT

st.set_page_config(page_title="Architecture · PlantID", layout="centered")

st.title("🏗️ Architecture Overview")
st.caption("How a plant photo travels from upload to a care guide")

st.divider()

st.subheader("🔄 Identification Pipeline")

st.markdown(
    """
    ```text
    User Image Upload
            │
            ▼
    Image Encoder
    (bytes → base64 + preview data URI)
            │
            ▼
    Prompt Builder
    (fixed JSON instruction + inline image)
            │
            ▼
    Gemini generateContent
    (single POST, no automatic retries)
            │
            ▼
    Response Parser
    (strip code fences → JSON → validated result)
            │
            ├───────────────┐
            ▼               ▼
    Plant Identification   Error Message
    (name, care, toxicity) (with Try Again)
                    │
                    ▼
            Reset ↺ back to upload
    ```
    """
)

st.divider()

st.subheader("🧩 Component Breakdown")

with st.expander("1️⃣ Image Encoder", expanded=True):
    st.markdown(
        """
        - Reads the uploaded file exactly once per attempt
        - Sends the original bytes unchanged (no resizing or compression)
        - Detects the image type with Pillow when the browser does not declare one
        """
    )

with st.expander("2️⃣ Prompt Builder", expanded=False):
    st.markdown("The instruction sent with every photo:")
    st.code(PLANT_IDENTIFICATION_PROMPT, language="text")

with st.expander("3️⃣ Gemini Client", expanded=False):
    st.markdown(
        """
        - Refuses to call the network when `GEMINI_API_KEY` is missing
        - Surfaces the HTTP status and upstream message on failure
        - Uses fixed generation settings tuned for well-formed JSON:
        """
    )
    st.code(json.dumps(GENERATION_CONFIG, indent=2), language="json")

with st.expander("4️⃣ Response Parser", expanded=False):
    st.markdown(
        """
        - Removes Markdown code fences the model sometimes adds
        - Treats `{"error": ...}` as "could not identify", not as a crash
        - Requires both a common and a scientific name
        """
    )

with st.expander("5️⃣ View State", expanded=False):
    st.markdown(
        """
        - One state object: empty, identifying, succeeded or failed
        - Late results from a superseded attempt are ignored
        - Reset always returns to a clean upload screen
        """
    )

st.divider()

st.caption("© PlantID · Architecture Diagram & Design")
st.markdown("Made with ❤️ using Streamlit")

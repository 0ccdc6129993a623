# ======================================================
# PlantID — AI Plant Identification App
# ======================================================

import sys
import html
import logging
from pathlib import Path

import streamlit as st

# ======================================================
# PATHS
# ======================================================
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from plantid.utils.api_client import build_client
from plantid.utils.config import Settings
from plantid.utils.controller import IdentificationController
from plantid.utils.state import Phase

# ======================================================
# STREAMLIT CONFIG
# ======================================================
st.set_page_config(page_title="PlantID", page_icon="🌿", layout="wide")


def load_secrets():
    try:
        return dict(st.secrets)
    except FileNotFoundError:
        # No secrets.toml in this deployment; environment variables only.
        return {}


settings = Settings.from_env(secrets=load_secrets())
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("plantid")


@st.cache_resource
def get_client(_settings, cache_key):
    return build_client(_settings)


client = get_client(
    settings,
    (settings.model, settings.base_url, settings.timeout_seconds, settings.use_mock, settings.api_key),
)

# ======================================================
# SESSION SAFETY
# ======================================================
if "controller" not in st.session_state:
    st.session_state.controller = IdentificationController(client)
if "uploader_nonce" not in st.session_state:
    st.session_state.uploader_nonce = 0

controller = st.session_state.controller
controller.client = client

# ======================================================
# HELPERS
# ======================================================
PHOTO_TIPS = [
    ("☀️", "Use good lighting"),
    ("📷", "Focus on leaves or flowers"),
    ("🍃", "Capture unique features"),
]


def render_preview(preview_uri, caption="Your plant photo", max_height_px=420):
    """Show the uploaded photo from its data URI, scaled to a fixed max height."""
    st.markdown(
        f"""
<div style="display: flex; justify-content: center; margin-bottom: 10px;">
    <img src="{html.escape(preview_uri, quote=True)}" alt="{html.escape(caption)}"
         style="max-height: {max_height_px}px; width: auto; border-radius: 16px;">
</div>""",
        unsafe_allow_html=True,
    )


def render_result(result):
    st.caption("🍃 Identified as")
    st.header(result.name)
    st.markdown(f"*{result.scientific_name}*")

    if result.common_names:
        st.markdown(" ".join(f"`{name}`" for name in result.common_names))

    if result.confidence is not None:
        st.caption(f"🟢 {result.confidence}% confidence")

    if result.description:
        st.subheader("ℹ️ About")
        st.write(result.description)

    if result.care and result.care.items():
        st.subheader("🌱 Care Guide")
        icons = {"Light": "☀️", "Water": "💧", "Humidity": "💦", "Temperature": "🌡️", "Soil": "🪴"}
        for label, value in result.care.items():
            st.markdown(f"{icons[label]} **{label}**  \n{value}")

    st.divider()
    c1, c2 = st.columns(2)
    c1.markdown(f"**Family**  \n{result.family or 'Unknown'}")
    if result.growth_rate:
        c2.markdown(f"**Growth Rate**  \n{result.growth_rate}")

    if result.is_toxic:
        st.warning(f"⚠️ **Safety Note**  \n{result.toxicity}")

    with st.expander("View raw identification data"):
        st.json(result.to_dict())


def reset_upload():
    logger.info("Upload reset by user")
    controller.reset()
    st.session_state.uploader_nonce += 1


# ======================================================
# HEADER
# ======================================================
st.title("🌿 PlantID")
st.caption("Identify plants instantly with AI")

if settings.use_mock:
    st.sidebar.info("Running with the mock Gemini client. Results are canned examples.")
elif not settings.has_credential:
    st.sidebar.warning(
        "GEMINI_API_KEY is not configured. Add it to your environment or `.streamlit/secrets.toml`."
    )

state = controller.state

# ======================================================
# IMAGE UPLOAD
# ======================================================
if state.phase is Phase.EMPTY:
    st.subheader("Discover Your Plant")
    st.write("Upload a clear photo of your plant to identify it using AI")

    uploaded_file = st.file_uploader(
        "Click to upload or drag and drop",
        type=["jpg", "jpeg", "png", "webp"],
        help="Supports: JPG, PNG, WEBP (max 10MB)",
        key=f"uploader_{st.session_state.uploader_nonce}",
    )

    cols = st.columns(len(PHOTO_TIPS))
    for col, (icon, tip) in zip(cols, PHOTO_TIPS):
        col.info(f"{icon} {tip}")

    if uploaded_file is not None:
        logger.info("Received upload %s (%s bytes)", uploaded_file.name, uploaded_file.size)
        with st.spinner("Analyzing your plant with AI... This may take a few seconds"):
            controller.select_upload(uploaded_file)
        st.rerun()

# ======================================================
# PHOTO + RESULT
# ======================================================
else:
    left, right = st.columns(2)

    with left:
        st.subheader("📷 Your Plant Photo")
        if state.preview_uri:
            render_preview(state.preview_uri)
        else:
            st.info("Preview not available for this file.")
        st.button("✕ Remove photo", on_click=reset_upload)

    with right:
        if state.phase is Phase.IDENTIFYING:
            # Only reachable if a previous run was interrupted mid-attempt.
            if state.image is None:
                controller.reset()
            else:
                with st.spinner("Analyzing your plant with AI..."):
                    controller.select_image(state.image)
            st.rerun()
        elif state.phase is Phase.FAILED:
            st.error(state.error)
            if state.can_retry and st.button("Try Again"):
                with st.spinner("Analyzing your plant with AI..."):
                    controller.retry()
                st.rerun()
        elif state.phase is Phase.SUCCEEDED:
            render_result(state.result)

st.divider()
st.caption("Powered by Google Gemini AI • Upload a photo to identify plants instantly")

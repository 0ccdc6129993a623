# utils/image_encoder.py
import io
import base64
import logging
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from plantid.utils.errors import EncodingError

logger = logging.getLogger(__name__)

FALLBACK_MIME_TYPE = "image/png"


@dataclass(frozen=True)
class UploadedImage:
    content: bytes
    mime_type: str
    size: int
    name: str = "upload"

    @classmethod
    def from_upload(cls, uploaded_file):
        """Build an UploadedImage from a Streamlit UploadedFile (or any file-like upload)."""
        try:
            if hasattr(uploaded_file, "getvalue"):
                content = uploaded_file.getvalue()
            else:
                uploaded_file.seek(0)
                content = uploaded_file.read()
        except (OSError, ValueError) as exc:
            raise EncodingError(f"Could not read the uploaded file: {exc}") from exc

        return cls(
            content=bytes(content),
            mime_type=getattr(uploaded_file, "type", None) or "",
            size=getattr(uploaded_file, "size", None) or len(content),
            name=getattr(uploaded_file, "name", None) or "upload",
        )


@dataclass(frozen=True)
class EncodedImage:
    data: str
    mime_type: str

    @property
    def preview_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


def sniff_mime_type(content: bytes):
    """Return the MIME type Pillow detects for the bytes, or None."""
    try:
        with Image.open(io.BytesIO(content)) as img:
            return Image.MIME.get(img.format)
    except (UnidentifiedImageError, OSError):
        return None


def resolve_mime_type(image: UploadedImage) -> str:
    declared = (image.mime_type or "").strip().lower()
    if declared.startswith("image/"):
        return declared
    sniffed = sniff_mime_type(image.content)
    if sniffed:
        logger.info("Declared type %r for %s, detected %s", declared, image.name, sniffed)
        return sniffed
    return FALLBACK_MIME_TYPE


def encode_image(image: UploadedImage) -> EncodedImage:
    """
    Encode the uploaded bytes as base64 for the request body.
    The preview URI is the same payload wrapped as a data URI.
    """
    content = image.content
    if not isinstance(content, (bytes, bytearray, memoryview)):
        raise EncodingError(f"Could not read '{image.name}': unsupported content type {type(content).__name__}")

    try:
        data = base64.b64encode(bytes(content)).decode("ascii")
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Could not read '{image.name}': {exc}") from exc

    return EncodedImage(data=data, mime_type=resolve_mime_type(image))

"""
Common image utility functions for background detection.

Images are kept as numpy arrays in RGB / RGBA / greyscale band order, which is
what the pixel engine expects. OpenCV's BGR order never leaves this module.
"""

import cv2
import numpy as np
from typing import List, Sequence, Tuple, Union
import io
from PIL import Image


def _from_opencv(image: np.ndarray) -> np.ndarray:
    """Reorder a decoded OpenCV image from BGR(A) to RGB(A)."""
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    return image


def _to_opencv(image: np.ndarray) -> np.ndarray:
    """Reorder an RGB(A) image to OpenCV's BGR(A)."""
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_RGB2BGR)
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_RGBA2BGRA)
    return image


def load_image(source: Union[str, bytes, io.BytesIO, np.ndarray]) -> np.ndarray:
    """
    Load image from various sources, keeping alpha and greyscale as stored.

    Args:
        source: File path, bytes, BytesIO stream, or numpy array

    Returns:
        RGB, RGBA or greyscale numpy array
    """
    if isinstance(source, np.ndarray):
        return source

    if isinstance(source, str):
        # File path
        image = cv2.imread(source, cv2.IMREAD_UNCHANGED)
        if image is None:
            raise ValueError(f"Could not load image from: {source}")
        return _from_opencv(image)

    if isinstance(source, bytes):
        return bytes_to_image(source)

    if isinstance(source, io.BytesIO):
        # BytesIO stream
        source.seek(0)
        data = source.read()
        return load_image(data)

    # Try to read from file-like object
    if hasattr(source, 'read'):
        data = source.read()
        return load_image(data)

    raise ValueError(f"Unsupported image source type: {type(source)}")


def ensure_uint8(image: np.ndarray) -> np.ndarray:
    """
    Ensure image is uint8 type with values in [0, 255].

    Args:
        image: Input image

    Returns:
        uint8 image
    """
    if image.dtype == np.uint8:
        return image

    # 16-bit sources map 65535 onto 255
    if image.dtype == np.uint16:
        return np.round(image / 257.0).astype(np.uint8)

    # Handle float images (0-1 range when nothing exceeds 1)
    if np.issubdtype(image.dtype, np.floating):
        if is_unit_float(image):
            image = image * 255.0
        image = np.nan_to_num(image)

    return np.clip(image, 0, 255).astype(np.uint8)


def is_unit_float(image: np.ndarray) -> bool:
    """True for float images whose values all lie in [0, 1]."""
    if not np.issubdtype(image.dtype, np.floating) or image.size == 0:
        return False
    return bool(np.nanmax(image) <= 1.0)


def from_uint8_scale(values: Sequence[float], image: np.ndarray) -> List[float]:
    """
    Map 0-255 values back onto the value range of an image.

    Inverse of the scaling ensure_uint8() applies to `image`.

    Args:
        values: Values on the 8-bit scale
        image: Image whose dtype and range decide the target scale

    Returns:
        Values on the image's own scale
    """
    if image.dtype == np.uint16:
        factor = 257.0
    elif is_unit_float(image):
        factor = 1.0 / 255.0
    else:
        factor = 1.0
    return [float(v) * factor for v in values]


def validate_image(image: np.ndarray) -> Tuple[bool, str]:
    """
    Validate image for analysis.

    Args:
        image: Input image

    Returns:
        Tuple of (is_valid, error_message)
    """
    if image is None:
        return False, "Image is None"

    if not isinstance(image, np.ndarray):
        return False, f"Image is not a numpy array: {type(image)}"

    if image.ndim not in (2, 3):
        return False, f"Image has invalid dimensions: {image.shape}"

    if image.size == 0:
        return False, "Image is empty"

    # Check for NaN or Inf values
    if np.issubdtype(image.dtype, np.floating):
        if np.isnan(image).any():
            return False, "Image contains NaN values"

        if np.isinf(image).any():
            return False, "Image contains Inf values"

    return True, "OK"


def image_to_bytes(image: np.ndarray,
                   format: str = "PNG",
                   quality: int = 95) -> bytes:
    """
    Convert image to bytes.

    Args:
        image: RGB, RGBA or greyscale numpy array
        format: Output format (JPEG, PNG)
        quality: Compression quality

    Returns:
        Image bytes
    """
    if format.upper() == "JPEG":
        params = [cv2.IMWRITE_JPEG_QUALITY, quality]
        ext = ".jpg"
    elif format.upper() == "PNG":
        params = [cv2.IMWRITE_PNG_COMPRESSION, 9 - int(quality / 12)]
        ext = ".png"
    else:
        params = []
        ext = f".{format.lower()}"

    success, buffer = cv2.imencode(ext, _to_opencv(image), params)
    if not success:
        raise ValueError(f"Failed to encode image as {format}")

    return buffer.tobytes()


def bytes_to_image(data: bytes) -> np.ndarray:
    """
    Convert bytes to image.

    Args:
        data: Image bytes

    Returns:
        RGB, RGBA or greyscale numpy array
    """
    nparr = np.frombuffer(data, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)

    if image is None:
        raise ValueError("Failed to decode image from bytes")

    return _from_opencv(image)


def to_pil(image: np.ndarray) -> Image.Image:
    """
    Convert an RGB, RGBA or greyscale numpy array to a PIL Image.

    Args:
        image: Input array (any dtype, converted to 8 bits)

    Returns:
        PIL Image
    """
    arr = ensure_uint8(image)
    if arr.ndim == 3 and arr.shape[2] == 1:
        arr = arr[:, :, 0]
    return Image.fromarray(np.ascontiguousarray(arr))


def get_image_info(image: np.ndarray) -> dict:
    """
    Get information about an image.

    Args:
        image: Input image

    Returns:
        Dictionary with image information
    """
    h, w = image.shape[:2]
    channels = image.shape[2] if len(image.shape) > 2 else 1

    return {
        "width": w,
        "height": h,
        "channels": channels,
        "dtype": str(image.dtype),
        "size_bytes": image.nbytes,
        "aspect_ratio": round(w / h, 3),
    }

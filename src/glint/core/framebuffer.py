"""Conversion of linear radiance images into 8-bit RGB frame buffers.

The frame buffer is the final output of a render: width * height * 3 bytes,
row-major with the top row first, RGB per pixel. Each channel of the averaged
linear image is gamma encoded with the power 1 / 2.2, scaled by 255 and
truncated toward zero. Values outside [0, 255] saturate and NaN becomes 0.
"""

import numpy as np
import numpy.typing as npt

DEFAULT_GAMMA = 2.2


def apply_gamma(image: npt.ArrayLike, gamma: float = DEFAULT_GAMMA) -> npt.NDArray[np.float32]:
    """Raise every channel to the power 1 / gamma.

    Negative inputs have no real power and come out as NaN, which quantize()
    maps to 0.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")
    linear = np.asarray(image, dtype=np.float32)
    with np.errstate(invalid="ignore"):
        return np.power(linear, np.float32(1.0 / gamma))


def quantize(image: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Map channel values in [0, 1] onto bytes.

    Computes 255 * c truncated toward zero, saturating at 0 and 255.
    NaN maps to 0.
    """
    scaled = np.asarray(image, dtype=np.float32) * np.float32(255.0)
    scaled = np.nan_to_num(scaled, nan=0.0, posinf=255.0, neginf=0.0)
    return np.trunc(np.clip(scaled, 0.0, 255.0)).astype(np.uint8)


def to_bytes(image: npt.ArrayLike, gamma: float = DEFAULT_GAMMA) -> bytes:
    """Encode a linear (height, width, 3) image as a frame buffer.

    Returns:
        height * width * 3 bytes, top row first.

    Raises:
        ValueError: If the image is not an RGB image.
    """
    linear = np.asarray(image, dtype=np.float32)
    if linear.ndim != 3 or linear.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (height, width, 3), got {linear.shape}")
    return quantize(apply_gamma(linear, gamma)).tobytes(order="C")

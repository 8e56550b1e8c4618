"""
Per-channel bounding box of an interleaved attribute buffer.
"""

import numpy as np

from ..codec.delta import NUM_CHANNELS


class Bounds:
    """
    Running min/max of each of the 8 attribute channels.

    Example:
        bounds = Bounds()
        bounds.enclose(mesh.attribs)
        params = QuantParams.from_bounds(bounds)
    """

    def __init__(self):
        self.mins = np.empty(NUM_CHANNELS, dtype=np.float32)
        self.maxes = np.empty(NUM_CHANNELS, dtype=np.float32)
        self.clear()

    def clear(self) -> None:
        """Reset every channel to the empty interval (+inf, -inf)."""
        self.mins.fill(np.inf)
        self.maxes.fill(-np.inf)

    def is_empty(self) -> bool:
        return bool(np.any(self.mins > self.maxes))

    def enclose(self, attribs: np.ndarray) -> None:
        """
        Grow the bounds to cover every record in an attribute buffer.

        Args:
            attribs: Interleaved attributes, length 8 * N.

        Raises:
            ValueError: If the buffer length is not a multiple of 8 or it
                contains NaN or infinite values.
        """
        attribs = np.asarray(attribs, dtype=np.float32)
        if attribs.size % NUM_CHANNELS != 0:
            raise ValueError(
                f"Attribute buffer length {attribs.size} is not a multiple of {NUM_CHANNELS}"
            )
        if attribs.size == 0:
            return
        if not np.all(np.isfinite(attribs)):
            raise ValueError("Attribute buffer contains non-finite values")
        records = attribs.reshape(-1, NUM_CHANNELS)
        np.minimum(self.mins, records.min(axis=0), out=self.mins)
        np.maximum(self.maxes, records.max(axis=0), out=self.maxes)

    @classmethod
    def from_attribs(cls, attribs: np.ndarray) -> "Bounds":
        bounds = cls()
        bounds.enclose(attribs)
        return bounds

    def __repr__(self) -> str:
        return f"Bounds(mins={self.mins.tolist()}, maxes={self.maxes.tolist()})"

from .zstd import (
    FramedZstdSerializer,
    FramedZstdDeserializer,
    PickleZstdSerializer,
    PickleZstdDeserializer,
    split_frame,
)

__all__ = [
    "FramedZstdSerializer",
    "FramedZstdDeserializer",
    "PickleZstdSerializer",
    "PickleZstdDeserializer",
    "split_frame",
]

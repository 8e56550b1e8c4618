"""
Registry of named mesh codecs.

A codec pairs an encoder factory with the decoder factory able to read its
containers, each with the config dataclass its factory accepts.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Type

from ..decoder import AbstractDecoder
from ..encoder import AbstractEncoder


@dataclass(frozen=True)
class Codec:
    """A registered encoder/decoder pair."""
    name: str
    build_encoder: Callable[..., AbstractEncoder]
    encoder_config: Type
    build_decoder: Callable[..., AbstractDecoder]
    decoder_config: Type
    description: str = ""


CODECS: Dict[str, Codec] = {}


def register_codec(codec: Codec) -> Codec:
    """
    Add a codec to the registry.

    Raises:
        ValueError: If a codec of the same name is already registered.
    """
    if codec.name in CODECS:
        raise ValueError(f"Codec '{codec.name}' is already registered")
    CODECS[codec.name] = codec
    return codec


def get_codec(name: str) -> Codec:
    """
    Look up a codec by name.

    Raises:
        KeyError: If no codec of that name exists; the message lists the
            available names.
    """
    try:
        return CODECS[name]
    except KeyError:
        raise KeyError(f"Unknown codec '{name}'. Available: {sorted(CODECS)}") from None

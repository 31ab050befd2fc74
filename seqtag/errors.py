"""Exception types raised by the labeling engine.

The classes extend the built-in exceptions the scripts already catch
(``ValueError``, ``OSError`` and ``RuntimeError``), so callers that only
know about the built-ins keep working.
"""
from __future__ import annotations


class ConfigurationError(ValueError):
    """A setting is unsupported or cannot be parsed.

    Raised before any training or decoding work starts, for example when the
    trainer type is unknown or the manifest carries a non-numeric beam size.
    """


class DataAccessError(OSError):
    """A model file or a training corpus could not be read."""


class DecoderStateError(RuntimeError):
    """A decoder accessor was used before anything was decoded."""

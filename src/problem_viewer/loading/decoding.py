"""
Module: loading.decoding

Purpose:
    Decode fetched bytes according to a record's encoding hint.

Policy:
    - "utf-8" / "utf8": lenient UTF-8
    - "shift_jis" / "shift-jis" / "sjis" / "cp932": legacy CP932
    - "auto": strict UTF-8, falling back to CP932 only when UTF-8 is invalid
    - anything else: that codec, leniently; unknown codecs fall back to
      lenient UTF-8
    The legacy path itself falls back to lenient UTF-8 if the codec is
    unavailable, so decoding never fails outright.

Dependencies:
    - codecs (std)

Used By:
    - loading.byte_loader: ByteLoader.load()
"""

from __future__ import annotations

import codecs
import logging

logger = logging.getLogger(__name__)

AUTO = "auto"
DEFAULT_CODEC = "utf-8-sig"
LEGACY_CODEC = "cp932"

UTF8_ALIASES = frozenset({"utf-8", "utf8", "utf-8-sig"})
LEGACY_ALIASES = frozenset({"shift_jis", "shift-jis", "sjis", "cp932", "windows-31j", "ms932"})


def decode_lenient(data: bytes, codec: str = DEFAULT_CODEC) -> str:
    return data.decode(codec, errors="replace")


def decode_legacy(data: bytes, codec: str = LEGACY_CODEC) -> str:
    """Decode with the legacy regional codec, or lenient UTF-8 if unavailable."""
    try:
        codecs.lookup(codec)
    except LookupError:
        logger.debug(f"Codec {codec} unavailable, decoding as UTF-8")
        return decode_lenient(data)
    return data.decode(codec, errors="replace")


def decode_text(data: bytes, encoding_hint: str = AUTO) -> str:
    """
    Decode bytes using the hint policy described in the module docstring.

    Example:
        >>> decode_text("問題".encode("cp932"), "auto")
        '問題'
    """
    hint = (encoding_hint or AUTO).strip().lower()

    if hint in UTF8_ALIASES:
        return decode_lenient(data)
    if hint in LEGACY_ALIASES:
        return decode_legacy(data)
    if hint == AUTO:
        try:
            return data.decode(DEFAULT_CODEC)
        except UnicodeDecodeError:
            return decode_legacy(data)

    try:
        codecs.lookup(hint)
    except LookupError:
        logger.debug(f"Unknown encoding hint {encoding_hint!r}, decoding as UTF-8")
        return decode_lenient(data)
    return data.decode(hint, errors="replace")

from __future__ import annotations


class MonoCatcherError(Exception):
    """Base error for a single file that could not be processed."""

    kind = "error"

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class DecodeError(MonoCatcherError):
    """Source file missing, unreadable, or not a WAV/AIFF container."""

    kind = "decode_error"


class UnsupportedChannelLayout(MonoCatcherError):
    """Channel count outside {1, 2}."""

    kind = "unsupported_channel_layout"

    def __init__(self, path: str, channels: int):
        super().__init__(path, f"unsupported channel count {channels} (expected 1 or 2)")
        self.channels = channels


class EncodeError(MonoCatcherError):
    """Destination could not be written."""

    kind = "encode_error"

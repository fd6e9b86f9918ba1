from __future__ import annotations

import io
import os
from pathlib import Path
from typing import BinaryIO, Optional, Union

from .constants import DEFAULT_NAME
from .errors import InputUnavailableError


class InputSource:
    """Something the pipeline can read bytes from, plus the name to store them under."""

    name: str = DEFAULT_NAME

    def open(self) -> BinaryIO:
        raise NotImplementedError


class TextSource(InputSource):
    def __init__(self, text: str):
        self.text = text
        self.name = DEFAULT_NAME

    def open(self) -> BinaryIO:
        return io.BytesIO(self.text.encode("utf-8"))


class BytesSource(InputSource):
    def __init__(self, data: bytes, name: Optional[str] = None):
        self.data = bytes(data)
        self.name = name or DEFAULT_NAME

    def open(self) -> BinaryIO:
        return io.BytesIO(self.data)


class FileSource(InputSource):
    def __init__(self, path: Union[str, os.PathLike]):
        self.path = Path(path)
        self.name = self.path.name or DEFAULT_NAME

    def open(self) -> BinaryIO:
        try:
            return open(self.path, "rb")
        except OSError as exc:
            raise InputUnavailableError(f"cannot open {self.path}: {exc}") from exc


SourceLike = Union[InputSource, str, bytes, bytearray, os.PathLike]


def as_source(obj: SourceLike) -> InputSource:
    """Wrap plain values: ``str`` is free text, ``bytes`` raw data, paths are files."""
    if isinstance(obj, InputSource):
        return obj
    if isinstance(obj, str):
        return TextSource(obj)
    if isinstance(obj, (bytes, bytearray)):
        return BytesSource(obj)
    if isinstance(obj, os.PathLike):
        return FileSource(obj)
    raise TypeError(f"unsupported input type: {type(obj).__name__}")

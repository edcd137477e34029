"""Chunked streaming with progress reporting.

StreamProcessor moves bytes from a readable source to an optional writable
sink in fixed-size chunks. The caller plugs in a transform (cipher update,
hash update) and the processor reports cumulative progress after every
chunk, so arbitrarily large files run in bounded memory.
"""

from __future__ import annotations

from typing import BinaryIO, Callable, Optional

from crypthash.config import get_settings


ProgressCallback = Callable[[float, str], None]
Transform = Callable[[bytes], Optional[bytes]]


class StreamProcessor:
    """Copy ``source`` to ``sink`` chunk by chunk, reporting progress."""

    def __init__(self, chunk_size: Optional[int] = None, on_progress: Optional[ProgressCallback] = None):
        if chunk_size is None:
            chunk_size = get_settings().chunk_size
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self.on_progress = on_progress

    def _emit(self, percentage: float, message: str) -> None:
        if self.on_progress is not None:
            self.on_progress(percentage, message)

    def process(
        self,
        source: BinaryIO,
        sink: Optional[BinaryIO],
        transform: Optional[Transform] = None,
        total_size: Optional[int] = None,
        message: str = "",
        start: float = 0.0,
        end: float = 100.0,
    ) -> int:
        """
        Stream ``source`` through ``transform`` into ``sink``.

        Progress is scaled into ``[start, end]`` so a caller running several
        passes can split the 0-100 range between them. When ``total_size`` is
        unknown only the final event is emitted. Any exception from reading,
        the transform, writing or the callback stops processing; whatever was
        already written to ``sink`` stays there.

        Returns the number of source bytes consumed.
        """
        if not 0.0 <= start <= end <= 100.0:
            raise ValueError(f"invalid progress range [{start}, {end}]")

        span = end - start
        processed = 0
        last: Optional[float] = None
        while True:
            chunk = source.read(self.chunk_size)
            if not chunk:
                break
            processed += len(chunk)
            out = transform(chunk) if transform is not None else chunk
            if sink is not None and out:
                sink.write(out)

            if total_size:
                if processed >= total_size:
                    last = end
                else:
                    last = start + span * processed / total_size
                self._emit(last, message)

        if last != end:
            self._emit(end, message)
        return processed


class LimitedReader:
    """Expose at most ``limit`` bytes of an underlying binary stream."""

    def __init__(self, raw: BinaryIO, limit: int):
        self._raw = raw
        self._remaining = limit

    def read(self, size: int = -1) -> bytes:
        if self._remaining <= 0:
            return b""
        if size is None or size < 0 or size > self._remaining:
            size = self._remaining
        data = self._raw.read(size)
        self._remaining -= len(data)
        return data

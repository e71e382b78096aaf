"""
Binary serializer - Fixed 50-byte records for the external simulator.

Record layout (big-endian, no file header):
- 10 x float32: handle1.xyz, handle2.xyz, p1.xyz, roll
- 3 x flag byte: continuous roll, relative roll, equal distance CPs
- 7 x reserved zero byte
"""

from typing import BinaryIO, List, Sequence
import numpy as np

from trackspline.errors import ExportError
from trackspline.export.bezier import BezierSegment, SegmentFlags

RECORD_DTYPE = np.dtype([
    ("handle1", ">f4", (3,)),
    ("handle2", ">f4", (3,)),
    ("p1", ">f4", (3,)),
    ("roll", ">f4"),
    ("flags", "u1", (3,)),
    ("reserved", "u1", (7,)),
])

RECORD_SIZE = RECORD_DTYPE.itemsize  # 50 bytes


def encode_segments(segments: Sequence[BezierSegment]) -> bytes:
    """Pack segments into consecutive records, in list order."""
    records = np.zeros(len(segments), dtype=RECORD_DTYPE)
    for i, segment in enumerate(segments):
        records["handle1"][i] = segment.handle1
        records["handle2"][i] = segment.handle2
        records["p1"][i] = segment.p1
        records["roll"][i] = segment.roll
        records["flags"][i] = np.frombuffer(segment.flags.to_bytes(), dtype=np.uint8)
    return records.tobytes()


def write_to_export_file(stream: BinaryIO, segments: Sequence[BezierSegment]) -> int:
    """Write all segments to ``stream``.

    Args:
        stream: Writable binary stream
        segments: Ordered segment list (not modified)

    Returns:
        Number of bytes written (50 per segment)

    Raises:
        OSError: The stream failed or stopped accepting data; it may hold
            a truncated record set.
    """
    data = memoryview(encode_segments(segments))
    written = 0
    while written < len(data):
        count = stream.write(data[written:])
        if not count:
            raise OSError(f"stream accepted no data after {written} of {len(data)} bytes")
        written += count
    return written


def decode_segments(data: bytes) -> List[BezierSegment]:
    """Unpack records produced by :func:`encode_segments`."""
    if len(data) % RECORD_SIZE:
        raise ExportError(
            f"export data length {len(data)} is not a multiple of {RECORD_SIZE}"
        )

    records = np.frombuffer(data, dtype=RECORD_DTYPE)
    segments = []
    for record in records:
        segments.append(BezierSegment(
            p1=record["p1"].astype(float),
            handle1=record["handle1"].astype(float),
            handle2=record["handle2"].astype(float),
            roll=float(record["roll"]),
            flags=SegmentFlags.from_bytes(record["flags"].tobytes()),
        ))
    return segments


def read_export_file(stream: BinaryIO) -> List[BezierSegment]:
    """Read every record left in ``stream``."""
    return decode_segments(stream.read())

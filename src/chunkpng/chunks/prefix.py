"""PNG signature - the fixed 8 bytes that precede the first chunk."""

from dataclasses import dataclass

from ..constants import PNG_SIGNATURE
from ..utils.binary import BytesLike


@dataclass
class Signature:
    """
    Not a chunk (no length, type or CRC) but framed alongside them so the
    orchestrator can size and copy it the same way.
    """

    def calculate_chunk_length(self) -> int:
        return len(PNG_SIGNATURE)

    def update(self) -> 'Signature':
        return self

    def verify(self, data: BytesLike) -> bool:
        return bytes(data[:len(PNG_SIGNATURE)]) == PNG_SIGNATURE

    def copy_into(self, target: bytearray, offset: int) -> int:
        end = offset + len(PNG_SIGNATURE)
        target[offset:end] = PNG_SIGNATURE
        return end

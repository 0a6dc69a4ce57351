"""UTF-8 text storage with rune-aware replacement."""

from __future__ import annotations


def _is_continuation(byte: int) -> bool:
    return 0x80 <= byte <= 0xBF


def _sanitize(s: str | bytes) -> bytes:
    """Encode *s* as UTF-8, replacing ill-formed parts with U+FFFD."""
    if isinstance(s, (bytes, bytearray)):
        return bytes(s).decode("utf-8", errors="replace").encode("utf-8")
    cleaned = "".join("\ufffd" if 0xD800 <= ord(ch) <= 0xDFFF else ch for ch in s)
    return cleaned.encode("utf-8")


class EditBuffer:
    """Editable UTF-8 text addressed by byte offsets.

    Deletions count runes; insertions are taken as text. The buffer
    remembers whether its content changed since :meth:`changed` was last
    called.
    """

    def __init__(self, initial: str | bytes = "") -> None:
        self._data = bytearray(_sanitize(initial))
        self._changed = False

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def changed(self) -> bool:
        """Report whether the content changed since the last call, and reset."""
        was_changed = self._changed
        self._changed = False
        return was_changed

    def size(self) -> int:
        """Length of the content in bytes."""
        return len(self._data)

    def read_at(self, size: int, offset: int) -> bytes:
        """Read up to *size* bytes starting at byte *offset*.

        Raises EOFError when *offset* is exactly at the end of the content
        and IndexError when it lies outside it.
        """
        if size <= 0:
            return b""
        if offset == len(self._data):
            raise EOFError("read at end of buffer")
        if offset < 0 or offset > len(self._data):
            raise IndexError(f"offset {offset} outside buffer of {len(self._data)} bytes")
        return bytes(self._data[offset : offset + size])

    def replace_runes(self, byte_offset: int, rune_count: int, s: str | bytes) -> None:
        """Delete *rune_count* runes at *byte_offset* and insert *s* there.

        A negative count deletes runes before the offset, a positive count
        deletes runes after it.
        """
        self._delete_runes(byte_offset, rune_count)
        self._insert(byte_offset, s)

    def _delete_runes(self, caret: int, count: int) -> tuple[int, int]:
        caret = max(0, min(caret, len(self._data)))
        deleted_bytes = 0
        deleted_runes = 0
        start = caret
        while count < 0 and start > 0:
            step = 1
            while step < 4 and start - step > 0 and _is_continuation(self._data[start - step]):
                step += 1
            start -= step
            deleted_bytes += step
            deleted_runes += 1
            count += 1
        end = caret
        while count > 0 and end < len(self._data):
            end += self._rune_len_at(end)
            count -= 1
        if start != end:
            del self._data[start:end]
            self._changed = True
        return deleted_bytes, deleted_runes

    def _rune_len_at(self, pos: int) -> int:
        lead = self._data[pos]
        if lead < 0x80:
            want = 1
        elif 0xC2 <= lead <= 0xDF:
            want = 2
        elif 0xE0 <= lead <= 0xEF:
            want = 3
        elif 0xF0 <= lead <= 0xF4:
            want = 4
        else:
            return 1
        length = 1
        while (
            length < want
            and pos + length < len(self._data)
            and _is_continuation(self._data[pos + length])
        ):
            length += 1
        return length if length == want else 1

    def _insert(self, caret: int, s: str | bytes) -> None:
        encoded = _sanitize(s)
        if not encoded:
            return
        caret = max(0, min(caret, len(self._data)))
        self._data[caret:caret] = encoded
        self._changed = True

    def count_lines_before_offset(self, byte_offset: int) -> int:
        """Count newline bytes in the content before *byte_offset*."""
        byte_offset = min(byte_offset, len(self._data))
        if byte_offset <= 0:
            return 0
        return self._data.count(b"\n", 0, byte_offset)
"""
Decompression of the LCW format, also known as Format80. A compressed stream is a sequence of
commands, each introduced by a single command byte:

    0cccdddd dddddddd           copy c+3 bytes from d bytes back in the output
    10cccccc                    copy c literal bytes from the input, c > 0
    10000000                    end of stream
    11cccccc pppppppp pppppppp  copy c+3 bytes from absolute output position p
    11111110 cccccccc cccccccc  write c copies of the value byte that follows
    11111111 cccccccc cccccccc  copy c bytes from the absolute output position that follows

Multi-byte fields are little-endian. Back-references are copied one byte at a time, so a source
range that overlaps the destination repeats output that was produced by the same command.

The decoder never raises on malformed input. A command that lacks operand bytes, that refers to
output which does not exist yet, or whose copy or literal run exceeds the capacity of the output ends
decoding without writing anything. Only a fill is clipped to the remaining capacity. In all cases the
number of bytes produced so far is returned.
"""
from __future__ import annotations

from westmix.lib.types import buf

__all__ = ['decompress', 'decompress_into']


def _copy(dst: bytearray, pos: int, src: int, count: int) -> int:
    for _ in range(count):
        dst[pos] = dst[src]
        pos += 1
        src += 1
    return pos


def _decode(data: buf, dst: bytearray, bounded: bool) -> int:
    src = memoryview(data)
    end = len(src)
    cap = len(dst)
    pos = 0
    cursor = 0

    def room(count: int, clip: bool = False) -> int | None:
        nonlocal cap
        if pos + count <= cap:
            return count
        if bounded:
            return cap - pos if clip else None
        dst.extend(bytes(pos + count - cap))
        cap = len(dst)
        return count

    while cursor < end:
        if bounded and pos >= cap:
            break
        cmd = src[cursor]
        cursor += 1
        if not cmd & 0x80:
            if cursor >= end:
                break
            distance = (cmd & 0x0F) << 8 | src[cursor]
            cursor += 1
            count = (cmd >> 4 & 7) + 3
            if distance == 0 or distance > pos:
                break
            if (count := room(count)) is None:
                break
            pos = _copy(dst, pos, pos - distance, count)
        elif not cmd & 0x40:
            count = cmd & 0x3F
            if count == 0:
                break
            if cursor + count > end:
                break
            if (count := room(count)) is None:
                break
            dst[pos:pos + count] = src[cursor:cursor + count]
            cursor += count
            pos += count
        elif cmd == 0xFE:
            if cursor + 3 > end:
                break
            count = src[cursor] | src[cursor + 1] << 8
            value = src[cursor + 2]
            cursor += 3
            count = room(count, clip=True)
            dst[pos:pos + count] = bytes((value,)) * count
            pos += count
        else:
            if cmd == 0xFF:
                if cursor + 4 > end:
                    break
                count = src[cursor] | src[cursor + 1] << 8
                offset = src[cursor + 2] | src[cursor + 3] << 8
                cursor += 4
            else:
                if cursor + 2 > end:
                    break
                count = (cmd & 0x3F) + 3
                offset = src[cursor] | src[cursor + 1] << 8
                cursor += 2
            if offset >= pos:
                break
            if (count := room(count)) is None:
                break
            pos = _copy(dst, pos, offset, count)
    return pos


def decompress_into(data: buf, dst: bytearray | memoryview) -> int:
    """
    Decompress the LCW stream `data` into the writable buffer `dst` and return the number of bytes
    that were written. Decoding stops at the end marker, at the end of the input, when the output
    buffer is full, or at the first command that cannot be executed.
    """
    if isinstance(dst, bytearray):
        return _decode(data, dst, True)
    view = memoryview(dst)
    tmp = bytearray(len(view))
    size = _decode(data, tmp, True)
    view[:size] = tmp[:size]
    return size


def decompress(data: buf, size: int | None = None) -> bytearray:
    """
    Decompress the LCW stream `data`. If the uncompressed `size` is given, at most that many bytes
    are produced; otherwise the output grows as required. The result contains only the bytes that
    were actually written.
    """
    if size is None:
        out = bytearray()
        done = _decode(data, out, False)
    else:
        out = bytearray(size)
        done = _decode(data, out, True)
    del out[done:]
    return out

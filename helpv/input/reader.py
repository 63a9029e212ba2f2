"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into symbolic key names such
as ``"j"``, ``"Escape"``, ``"PageDown"`` or ``"Ctrl-u"``.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CONTROL_NAMES = {
    b"\t": "Tab",
    b"\r": "Enter",
    b"\n": "Enter",
    b"\x08": "Backspace",
    b"\x7f": "Backspace",
}

_CSI_FINAL_NAMES = {
    b"A": "Up",
    b"B": "Down",
    b"C": "Right",
    b"D": "Left",
    b"H": "Home",
    b"F": "End",
}

_CSI_TILDE_NAMES = {
    "1": "Home",
    "7": "Home",
    "4": "End",
    "8": "End",
    "3": "Delete",
    "5": "PageUp",
    "6": "PageDown",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _read_utf8_tail(fd: int, lead: bytes) -> str:
    first = lead[0]
    if first >= 0xF0:
        extra = 3
    elif first >= 0xE0:
        extra = 2
    elif first >= 0xC0:
        extra = 1
    else:
        extra = 0
    data = lead
    for _ in range(extra):
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            break
        data += part
    return data.decode("utf-8", errors="replace")


def _read_csi(fd: int) -> str:
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "Escape"
    name = _CSI_FINAL_NAMES.get(seq)
    if name is not None:
        return name
    if not seq.isdigit():
        return "Escape"
    digits = seq.decode("ascii")
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return "Escape"
        if part == b"~":
            return _CSI_TILDE_NAMES.get(digits, "Escape")
        if part.isdigit() or part == b";":
            digits += part.decode("ascii")
            if len(digits) > 16:
                return "Escape"
            continue
        # Modified arrows (ESC [ 1 ; 5 A) keep the base arrow name.
        return _CSI_FINAL_NAMES.get(part, "Escape")


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key and return its symbolic name, or ``""`` on timeout."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    name = _CONTROL_NAMES.get(ch)
    if name is not None:
        return name
    code = ch[0]
    if 1 <= code <= 26:
        return f"Ctrl-{chr(code + 96)}"

    if ch != b"\x1b":
        return _read_utf8_tail(fd, ch)

    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "Escape"
    if seq == b"[":
        return _read_csi(fd)
    if seq == b"O":
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "Escape"
        return _CSI_FINAL_NAMES.get(final, "Escape")
    if seq == b"\x1b":
        _PENDING_BYTES.append(seq)
        return "Escape"
    # Alt chords arrive as ESC + key and are reported as one unbound key.
    return f"Alt-{_CONTROL_NAMES.get(seq) or _read_utf8_tail(fd, seq)}"


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "read_key"]

"""MQ arithmetic encoder (ISO/IEC 15444-1 Annex C) and its shared state table."""

from __future__ import annotations

from dataclasses import dataclass

MQC_NUMCTXS = 19
BYPASS_CT_INIT = 0xDEAD_BEEF

T1_CTXNO_ZC = 0
T1_CTXNO_SC = 9
T1_CTXNO_MAG = 14
T1_CTXNO_AGG = 17
T1_CTXNO_UNI = 18

_MASK32 = 0xFFFF_FFFF


@dataclass(frozen=True)
class MqState:
    """One row of the probability-estimation state machine."""

    qeval: int
    mps: int
    nmps: int
    nlps: int


MQ_STATES: tuple[MqState, ...] = tuple(
    MqState(*row)
    for row in (
        (0x5601, 0, 2, 3), (0x5601, 1, 3, 2),
        (0x3401, 0, 4, 12), (0x3401, 1, 5, 13),
        (0x1801, 0, 6, 18), (0x1801, 1, 7, 19),
        (0x0AC1, 0, 8, 24), (0x0AC1, 1, 9, 25),
        (0x0521, 0, 10, 58), (0x0521, 1, 11, 59),
        (0x0221, 0, 76, 66), (0x0221, 1, 77, 67),
        (0x5601, 0, 14, 13), (0x5601, 1, 15, 12),
        (0x5401, 0, 16, 28), (0x5401, 1, 17, 29),
        (0x4801, 0, 18, 28), (0x4801, 1, 19, 29),
        (0x3801, 0, 20, 28), (0x3801, 1, 21, 29),
        (0x3001, 0, 22, 34), (0x3001, 1, 23, 35),
        (0x2401, 0, 24, 36), (0x2401, 1, 25, 37),
        (0x1C01, 0, 26, 40), (0x1C01, 1, 27, 41),
        (0x1601, 0, 58, 42), (0x1601, 1, 59, 43),
        (0x5601, 0, 30, 29), (0x5601, 1, 31, 28),
        (0x5401, 0, 32, 28), (0x5401, 1, 33, 29),
        (0x5101, 0, 34, 30), (0x5101, 1, 35, 31),
        (0x4801, 0, 36, 32), (0x4801, 1, 37, 33),
        (0x3801, 0, 38, 34), (0x3801, 1, 39, 35),
        (0x3401, 0, 40, 36), (0x3401, 1, 41, 37),
        (0x3001, 0, 42, 38), (0x3001, 1, 43, 39),
        (0x2801, 0, 44, 38), (0x2801, 1, 45, 39),
        (0x2401, 0, 46, 40), (0x2401, 1, 47, 41),
        (0x2201, 0, 48, 42), (0x2201, 1, 49, 43),
        (0x1C01, 0, 50, 44), (0x1C01, 1, 51, 45),
        (0x1801, 0, 52, 46), (0x1801, 1, 53, 47),
        (0x1601, 0, 54, 48), (0x1601, 1, 55, 49),
        (0x1401, 0, 56, 50), (0x1401, 1, 57, 51),
        (0x1201, 0, 58, 52), (0x1201, 1, 59, 53),
        (0x1101, 0, 60, 54), (0x1101, 1, 61, 55),
        (0x0AC1, 0, 62, 56), (0x0AC1, 1, 63, 57),
        (0x09C1, 0, 64, 58), (0x09C1, 1, 65, 59),
        (0x08A1, 0, 66, 60), (0x08A1, 1, 67, 61),
        (0x0521, 0, 68, 62), (0x0521, 1, 69, 63),
        (0x0441, 0, 70, 64), (0x0441, 1, 71, 65),
        (0x02A1, 0, 72, 66), (0x02A1, 1, 73, 67),
        (0x0221, 0, 74, 68), (0x0221, 1, 75, 69),
        (0x0141, 0, 76, 70), (0x0141, 1, 77, 71),
        (0x0111, 0, 78, 72), (0x0111, 1, 79, 73),
        (0x0085, 0, 80, 74), (0x0085, 1, 81, 75),
        (0x0049, 0, 82, 76), (0x0049, 1, 83, 77),
        (0x0025, 0, 84, 78), (0x0025, 1, 85, 79),
        (0x0015, 0, 86, 80), (0x0015, 1, 87, 81),
        (0x0009, 0, 88, 82), (0x0009, 1, 89, 83),
        (0x0005, 0, 90, 84), (0x0005, 1, 91, 85),
        (0x0001, 0, 90, 86), (0x0001, 1, 91, 87),
        (0x5601, 0, 92, 92), (0x5601, 1, 93, 93),
    )
)


def state_index_for(msb: int, prob: int) -> int:
    """Table index for a context initialised to (msb, prob)."""
    index = msb + (prob << 1)
    if not 0 <= index < len(MQ_STATES):
        raise ValueError(f"MQ state index {index} out of range")
    return index


def initial_contexts() -> list[int]:
    """Context table after a reset: all zero except ZC, AGG and UNI."""
    ctxs = [0] * MQC_NUMCTXS
    ctxs[T1_CTXNO_UNI] = state_index_for(0, 46)
    ctxs[T1_CTXNO_AGG] = state_index_for(0, 3)
    ctxs[T1_CTXNO_ZC] = state_index_for(0, 4)
    return ctxs


class MqCoder:
    """MQ encoder with a one-byte pre-buffer, as in the standard's model."""

    def __init__(self, capacity: int = 256) -> None:
        self._capacity = max(capacity, 1)
        self._ctxs = initial_contexts()
        self.restart_init()

    def reset(self) -> None:
        """Restart the registers, clear output and reset every context."""
        self.restart_init()
        self._ctxs = initial_contexts()

    def set_state(self, ctx: int, msb: int, prob: int) -> None:
        self._ctxs[ctx] = state_index_for(msb, prob)

    def state_index(self, ctx: int) -> int:
        return self._ctxs[ctx]

    def encode_with_ctx(self, ctx: int, bit: int) -> None:
        """Code one binary decision in context ``ctx``."""
        if bit not in (0, 1):
            raise ValueError(f"MQ symbol must be 0 or 1, got {bit}")
        state = MQ_STATES[self._ctxs[ctx]]
        qeval = state.qeval
        self._a = (self._a - qeval) & _MASK32
        if bit == state.mps:
            if self._a & 0x8000 == 0:
                if self._a < qeval:
                    self._a = qeval
                else:
                    self._c = (self._c + qeval) & _MASK32
                self._ctxs[ctx] = state.nmps
                self._renorme()
            else:
                self._c = (self._c + qeval) & _MASK32
        else:
            if self._a < qeval:
                self._c = (self._c + qeval) & _MASK32
            else:
                self._a = qeval
            self._ctxs[ctx] = state.nlps
            self._renorme()

    def flush(self) -> None:
        """Terminate the current codeword (FLUSH procedure)."""
        self._setbits()
        self._c = (self._c << self._ct) & _MASK32
        self._byteout()
        self._c = (self._c << self._ct) & _MASK32
        self._byteout()

    def restart_init(self) -> None:
        """Reset registers and output while keeping context states."""
        self._a = 0x8000
        self._c = 0
        self._ct = 12
        self._out = bytearray(1)
        self._pos = 0

    def flush_and_restart(self) -> bytes:
        """Flush this pass, return its bytes and restart for the next pass."""
        self.flush()
        data = self._take_bytes()
        self.restart_init()
        return data

    def erterm_flush(self) -> bytes:
        """Predictable (error-resilient) termination; returns the coded bytes."""
        k = 11 - self._ct + 1
        while k > 0:
            self._c = (self._c << self._ct) & _MASK32
            self._ct = 0
            self._byteout()
            k -= self._ct
        if self._out[self._pos] != 0xFF:
            self._byteout()
        return bytes(self._out[1 : self._pos])

    def segmark_encode(self) -> None:
        """Emit the 1010 segmentation symbol in the uniform context."""
        for bit in (1, 0, 1, 0):
            self.encode_with_ctx(T1_CTXNO_UNI, bit)

    def bypass_init(self) -> None:
        self._c = 0
        self._ct = BYPASS_CT_INIT

    def bypass_encode(self, bit: int) -> None:
        """Write one raw (bypass-mode) bit."""
        if bit not in (0, 1):
            raise ValueError(f"raw bit must be 0 or 1, got {bit}")
        if self._ct == BYPASS_CT_INIT:
            self._ct = 8
        self._ct -= 1
        self._c = (self._c + (bit << self._ct)) & _MASK32
        if self._ct == 0:
            self._write_next(self._c & 0xFF)
            self._ct = 8
            if self._out[self._pos] == 0xFF:
                self._ct = 7
            self._c = 0

    def bypass_flush(self, erterm: bool) -> None:
        """Terminate a raw segment, padding or trimming as the standard allows."""
        prev_is_ff = self._pos > 0 and self._out[self._pos] == 0xFF
        if self._ct < 7 or (self._ct == 7 and (erterm or not prev_is_ff)):
            bit = 0
            while self._ct > 0:
                self._ct -= 1
                self._c = (self._c + (bit << self._ct)) & _MASK32
                bit ^= 1
            self._write_next(self._c & 0xFF)
        elif self._ct == 7 and prev_is_ff:
            if erterm:
                raise AssertionError("unexpected trailing 0xff under ERTERM")
            self._out.pop()
            self._pos = max(self._pos - 1, 0)
        elif (
            self._ct == 8
            and not erterm
            and self._pos >= 2
            and self._out[self._pos] == 0x7F
            and self._out[self._pos - 1] == 0xFF
        ):
            del self._out[self._pos - 1 :]
            self._pos -= 2

    def raw_term_flush_and_restart(self, erterm: bool) -> bytes:
        self.bypass_flush(erterm)
        data = self._take_bytes()
        self.restart_init()
        return data

    def finish(self) -> bytes:
        """Flush and return the complete codeword."""
        self.flush()
        return self._take_bytes()

    def numbytes(self) -> int:
        """Bytes committed to the output so far."""
        return self._pos

    def _renorme(self) -> None:
        while self._a & 0x8000 == 0:
            self._a = (self._a << 1) & _MASK32
            self._c = (self._c << 1) & _MASK32
            self._ct -= 1
            if self._ct == 0:
                self._byteout()

    def _setbits(self) -> None:
        temp = (self._c + self._a) & _MASK32
        self._c |= 0xFFFF
        if self._c >= temp:
            self._c = (self._c - 0x8000) & _MASK32

    def _byteout(self) -> None:
        if self._out[self._pos] == 0xFF:
            self._emit_after_ff()
        elif self._c & 0x0800_0000 == 0:
            self._emit_normal()
        else:
            self._out[self._pos] = (self._out[self._pos] + 1) & 0xFF
            if self._out[self._pos] == 0xFF:
                self._c &= 0x07FF_FFFF
                self._emit_after_ff()
            else:
                self._emit_normal()

    def _emit_after_ff(self) -> None:
        self._write_next((self._c >> 20) & 0xFF)
        self._c &= 0x000F_FFFF
        self._ct = 7

    def _emit_normal(self) -> None:
        self._write_next((self._c >> 19) & 0xFF)
        self._c &= 0x0007_FFFF
        self._ct = 8

    def _write_next(self, byte: int) -> None:
        self._pos += 1
        if self._pos == len(self._out):
            self._out.append(byte)
        else:
            self._out[self._pos] = byte

    def _take_bytes(self) -> bytes:
        end = self._pos if self._out[self._pos] == 0xFF else self._pos + 1
        return bytes(self._out[1:end])
"""MQ arithmetic decoder (ISO/IEC 15444-1 Annex C), the inverse of MqCoder."""

from __future__ import annotations

from jp2lam.mq_encoder import MQ_STATES, MqState, initial_contexts, state_index_for

_MASK32 = 0xFFFF_FFFF


class MqDecoder:
    """Decodes binary decisions from an MQ-coded byte string.

    Reading past the end of the data behaves as if the input were padded
    with 0xff bytes, as the standard requires.
    """

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._bp = 0
        self._a = 0x8000
        self._c = (self._data[0] if self._data else 0xFF) << 16
        self._ct = 0
        self._ctxs = initial_contexts()
        self._bytein()
        self._c = (self._c << 7) & _MASK32
        self._ct = max(self._ct - 7, 0)

    def decode_with_ctx(self, ctx: int) -> int:
        """Decode one binary decision in context ``ctx``."""
        state = MQ_STATES[self._ctxs[ctx]]
        qeval = state.qeval
        self._a = (self._a - qeval) & _MASK32

        if (self._c >> 16) < qeval:
            bit = self._lps_exchange(ctx, state)
        else:
            self._c = (self._c - (qeval << 16)) & _MASK32
            if self._a & 0x8000 == 0:
                bit = self._mps_exchange(ctx, state)
            else:
                bit = state.mps

        if self._a & 0x8000 == 0:
            self._renormd()
        return bit

    def set_state(self, ctx: int, msb: int, prob: int) -> None:
        self._ctxs[ctx] = state_index_for(msb, prob)

    def state_index(self, ctx: int) -> int:
        return self._ctxs[ctx]

    def _mps_exchange(self, ctx: int, state: MqState) -> int:
        if self._a < state.qeval:
            self._ctxs[ctx] = state.nlps
            return 1 ^ state.mps
        self._ctxs[ctx] = state.nmps
        return state.mps

    def _lps_exchange(self, ctx: int, state: MqState) -> int:
        post_subtraction_a = self._a
        self._a = state.qeval
        if post_subtraction_a < state.qeval:
            self._ctxs[ctx] = state.nmps
            return state.mps
        self._ctxs[ctx] = state.nlps
        return 1 ^ state.mps

    def _renormd(self) -> None:
        while self._a < 0x8000:
            if self._ct == 0:
                self._bytein()
            self._a = (self._a << 1) & _MASK32
            self._c = (self._c << 1) & _MASK32
            self._ct -= 1

    def _bytein(self) -> None:
        following = self._byte_at(self._bp + 1)
        if self._byte_at(self._bp) == 0xFF:
            if following > 0x8F:
                self._c = (self._c + 0xFF00) & _MASK32
                self._ct = 8
            else:
                self._bp += 1
                self._c = (self._c + (following << 9)) & _MASK32
                self._ct = 7
        else:
            self._bp += 1
            self._c = (self._c + (following << 8)) & _MASK32
            self._ct = 8

    def _byte_at(self, index: int) -> int:
        return self._data[index] if index < len(self._data) else 0xFF
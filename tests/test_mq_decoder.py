import pytest

from jp2lam.mq_decoder import MqDecoder
from jp2lam.mq_encoder import (
    MqCoder,
    T1_CTXNO_AGG,
    T1_CTXNO_MAG,
    T1_CTXNO_SC,
    T1_CTXNO_UNI,
    T1_CTXNO_ZC,
)

_MASK64 = 0xFFFF_FFFF_FFFF_FFFF
_MASK32 = 0xFFFF_FFFF
_CTXS = [T1_CTXNO_ZC, T1_CTXNO_SC, T1_CTXNO_MAG, T1_CTXNO_AGG, T1_CTXNO_UNI]


def _xorshift(state):
    x = state
    x ^= (x << 13) & _MASK64
    x ^= x >> 7
    x ^= (x << 17) & _MASK64
    return x & _MASK64


def _encode(bits):
    coder = MqCoder()
    for ctx, bit in bits:
        coder.encode_with_ctx(ctx, bit)
    return coder.finish()


def _decode(data, bits):
    decoder = MqDecoder(data)
    return [decoder.decode_with_ctx(ctx) for ctx, _ in bits]


def _assert_roundtrip(bits):
    data = _encode(bits)
    decoded = _decode(data, bits)
    assert decoded == [bit for _, bit in bits]


def test_decoder_initializes_special_contexts_like_encoder():
    decoder = MqDecoder(b"")
    assert decoder.state_index(T1_CTXNO_ZC) == 8
    assert decoder.state_index(T1_CTXNO_AGG) == 6
    assert decoder.state_index(T1_CTXNO_UNI) == 92
    assert decoder.state_index(T1_CTXNO_MAG) == 0


def test_decoder_roundtrips_mixed_contexts():
    bits = []
    for i in range(800):
        ctx = _CTXS[(i * 7) % len(_CTXS)]
        bit = ((((i * 1103515245) & _MASK32) + 12345) & _MASK32) >> 29 & 1
        bits.append((ctx, bit))
    _assert_roundtrip(bits)


def test_roundtrip_deterministic_uni_sequence():
    bits = [(T1_CTXNO_UNI, b) for b in (1, 0, 1, 1, 0, 0, 1, 0, 1, 1, 1, 0)]
    _assert_roundtrip(bits)


@pytest.mark.parametrize("value", [0, 1])
def test_roundtrip_constant_stream(value):
    _assert_roundtrip([(T1_CTXNO_UNI, value)] * 256)


def test_roundtrip_alternating_agg():
    _assert_roundtrip([(T1_CTXNO_AGG, i & 1) for i in range(512)])


def test_roundtrip_skewed_mps():
    state = 0xDEAD_BEEF_CAFE_BABE
    bits = []
    for _ in range(5000):
        state = _xorshift(state)
        bits.append((T1_CTXNO_AGG, 1 if (state & 0xFF) < 8 else 0))
    _assert_roundtrip(bits)


@pytest.mark.parametrize("seed_base", range(8))
def test_roundtrip_randomized(seed_base):
    state = (seed_base + 0x9E3779B97F4A7C15) & _MASK64 or 1
    state = _xorshift(state)
    n = 100 + state % 1500
    bits = []
    for _ in range(n):
        state = _xorshift(state)
        bits.append((_CTXS[state % len(_CTXS)], (state >> 32) & 1))
    _assert_roundtrip(bits)


def test_decoder_tracks_encoder_context_states():
    bits = [(T1_CTXNO_AGG, 1), (T1_CTXNO_AGG, 0), (T1_CTXNO_ZC, 1), (T1_CTXNO_UNI, 0)]
    coder = MqCoder()
    for ctx, bit in bits:
        coder.encode_with_ctx(ctx, bit)
    expected = {ctx: coder.state_index(ctx) for ctx in _CTXS}
    data = coder.finish()
    decoder = MqDecoder(data)
    for ctx, _ in bits:
        decoder.decode_with_ctx(ctx)
    assert {ctx: decoder.state_index(ctx) for ctx in _CTXS} == expected


def test_set_state_sets_table_index():
    decoder = MqDecoder(b"\x00")
    decoder.set_state(T1_CTXNO_MAG, 1, 5)
    assert decoder.state_index(T1_CTXNO_MAG) == 11


def test_set_state_rejects_out_of_range_index():
    decoder = MqDecoder(b"")
    with pytest.raises(ValueError):
        decoder.set_state(T1_CTXNO_MAG, 0, 47)


def test_roundtrip_with_custom_initial_state():
    bits = [(T1_CTXNO_MAG, b) for b in (1, 1, 0, 1, 0, 0, 0, 1, 1, 0)]
    coder = MqCoder()
    coder.set_state(T1_CTXNO_MAG, 1, 3)
    for ctx, bit in bits:
        coder.encode_with_ctx(ctx, bit)
    data = coder.finish()
    decoder = MqDecoder(data)
    decoder.set_state(T1_CTXNO_MAG, 1, 3)
    assert [decoder.decode_with_ctx(ctx) for ctx, _ in bits] == [b for _, b in bits]
import base64

import pytest

from easy_celestia.blob_id import HEIGHT_SIZE, decode_blob_id, encode_blob_id
from easy_celestia.errors import EncodingError

COMMITMENT = bytes(range(32))
COMMITMENT_B64 = base64.b64encode(COMMITMENT).decode()


def _raw(blob_id: str) -> bytes:
    return base64.b64decode(blob_id)


def test_layout_is_le_height_then_commitment():
    raw = _raw(encode_blob_id(0x0102030405060708, COMMITMENT_B64))
    assert raw[:HEIGHT_SIZE] == bytes([8, 7, 6, 5, 4, 3, 2, 1])
    assert raw[HEIGHT_SIZE:] == COMMITMENT


def test_height_one_is_least_significant_byte_first():
    raw = _raw(encode_blob_id(1, COMMITMENT_B64))
    assert raw[:HEIGHT_SIZE] == b"\x01" + bytes(7)


def test_height_256_only_moves_one_byte():
    one = _raw(encode_blob_id(1, COMMITMENT_B64))
    two_fifty_six = _raw(encode_blob_id(256, COMMITMENT_B64))
    assert two_fifty_six[:HEIGHT_SIZE] == b"\x00\x01" + bytes(6)
    diff = [i for i in range(len(one)) if one[i] != two_fifty_six[i]]
    assert diff == [0, 1]


def test_matches_int_to_bytes_little_endian():
    for height in (0, 7, 255, 1_234_567, 2**32 + 5):
        raw = _raw(encode_blob_id(height, COMMITMENT_B64))
        assert raw[:HEIGHT_SIZE] == height.to_bytes(8, "little")


@pytest.mark.parametrize("height", [0, 1, 256, 65_535, 3_141_592, 2**63, 2**64 - 1])
@pytest.mark.parametrize("commitment", [b"", b"\x00", COMMITMENT, b"\xff" * 48])
def test_roundtrip(height, commitment):
    blob_id = encode_blob_id(height, base64.b64encode(commitment).decode())
    assert decode_blob_id(blob_id) == (height, commitment)


def test_url_safe_commitment_is_accepted():
    commitment = b"\xfb\xff\xfe" * 11
    url_safe = base64.urlsafe_b64encode(commitment).decode()
    assert "-" in url_safe or "_" in url_safe
    assert decode_blob_id(encode_blob_id(9, url_safe)) == (9, commitment)


@pytest.mark.parametrize("height", [2**64, 2**80, -1])
def test_height_out_of_range(height):
    with pytest.raises(EncodingError):
        encode_blob_id(height, COMMITMENT_B64)


@pytest.mark.parametrize("height", ["1", 1.0, True, None])
def test_height_must_be_int(height):
    with pytest.raises(EncodingError):
        encode_blob_id(height, COMMITMENT_B64)  # type: ignore[arg-type]


def test_bad_commitment():
    with pytest.raises(EncodingError):
        encode_blob_id(1, "%%%not-base64%%%")


def test_decode_rejects_short_or_malformed_ids():
    with pytest.raises(EncodingError):
        decode_blob_id(base64.b64encode(b"\x01\x02\x03").decode())
    with pytest.raises(EncodingError):
        decode_blob_id("!!!")

import io

import pytest

from bitio import END_OF_STREAM, BitReader, BitWriter


def read_all(reader):
    bits = []
    while True:
        bit = reader.read_bit()
        if bit == END_OF_STREAM:
            return bits
        bits.append(bit)


def test_reader_is_msb_first():
    assert read_all(BitReader(b"\xa0")) == [1, 0, 1, 0, 0, 0, 0, 0]


def test_reader_spans_bytes():
    assert read_all(BitReader(b"\x80\x01")) == [1] + [0] * 14 + [1]


def test_reader_over_file_object():
    assert read_all(BitReader(io.BytesIO(b"\x0f"))) == [0, 0, 0, 0, 1, 1, 1, 1]


def test_reader_end_of_stream_is_sticky():
    reader = BitReader(b"")
    assert reader.read_bit() == END_OF_STREAM
    assert reader.read_bit() == END_OF_STREAM


def test_end_of_stream_is_not_a_bit():
    assert END_OF_STREAM not in (0, 1)


def test_writer_pads_last_byte_with_zeros():
    writer = BitWriter()
    writer.write_bits("101")
    assert writer.pad_bits == 5
    assert writer.getvalue() == b"\xa0"


def test_writer_full_bytes_need_no_padding():
    writer = BitWriter()
    writer.write_bits("11110000" "00000001")
    assert writer.pad_bits == 0
    assert writer.getvalue() == b"\xf0\x01"


def test_writer_rejects_non_bits():
    with pytest.raises(ValueError):
        BitWriter().write_bits("012")


def test_writer_output_reads_back():
    bits = "1101001110001"
    writer = BitWriter()
    writer.write_bits(bits)
    read_back = read_all(BitReader(writer.getvalue()))
    assert "".join(map(str, read_back[:len(bits)])) == bits
    assert read_back[len(bits):] == [0] * writer.pad_bits

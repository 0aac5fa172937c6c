import struct
import time
import unittest

from lanchat.protocol import (
    HEADER_SIZE, Command, Message, crc16, decode, encode,
)


class Crc16Test(unittest.TestCase):

    def test_check_value(self):
        self.assertEqual(crc16(b"123456789"), 0x906E)

    def test_empty_payload(self):
        self.assertEqual(crc16(b""), 0x0000)
        self.assertEqual(Message.empty().checksum, crc16(b""))


class FrameLayoutTest(unittest.TestCase):

    def test_header_is_seven_bytes(self):
        self.assertEqual(HEADER_SIZE, 7)

    def test_encode_layout(self):
        msg = Message.build(Command.TEXT, b"hi", msg_id=0x01020304)
        frame = encode(msg)
        self.assertEqual(frame[:4], b"\x01\x02\x03\x04")
        self.assertEqual(frame[4:6], crc16(b"hi").to_bytes(2, "big"))
        self.assertEqual(frame[6], int(Command.TEXT))
        self.assertEqual(frame[7:], b"hi")

    def test_command_tags(self):
        self.assertEqual(
            [int(c) for c in Command],
            list(range(8)),
        )
        self.assertEqual(Command.ASK_TO_REPEAT, 5)


class DecodeTest(unittest.TestCase):

    def test_round_trip(self):
        samples = [
            Message.enter("alice"),
            Message.text("héllo wörld"),
            Message.exit(),
            Message.ask_to_repeat(42),
            Message.repeat(7, "again"),
            Message.build(Command.DAMAGED, msg_id=0xFFFFFFFF),
        ]
        for msg in samples:
            out = decode(encode(msg))
            self.assertEqual((out.id, out.command, out.data),
                             (msg.id, msg.command, msg.data))

    def test_single_bit_flip_in_payload_yields_empty(self):
        frame = encode(Message.build(Command.TEXT, b"hello", msg_id=99))
        for index in range(HEADER_SIZE, len(frame)):
            for bit in range(8):
                damaged = bytearray(frame)
                damaged[index] ^= 1 << bit
                out = decode(bytes(damaged))
                self.assertIs(out.command, Command.EMPTY)
                self.assertEqual(out.data, b"")

    def test_short_frames_rejected(self):
        for n in range(HEADER_SIZE):
            self.assertIsNone(decode(b"\x00" * n))

    def test_ten_bytes_with_wrong_checksum(self):
        payload = b"abc"
        wrong = (crc16(payload) ^ 0x0101) & 0xFFFF
        raw = struct.pack("!IHB", 5, wrong, int(Command.TEXT)) + payload
        self.assertEqual(len(raw), 10)
        self.assertIs(decode(raw).command, Command.EMPTY)

    def test_unknown_tag_decodes_to_error(self):
        raw = struct.pack("!IHB", 1, crc16(b"x"), 200) + b"x"
        out = decode(raw)
        self.assertIs(out.command, Command.ERROR)
        self.assertEqual(out.data, b"x")


class MessageTest(unittest.TestCase):

    def test_id_is_epoch_seconds(self):
        before = int(time.time())
        msg = Message.text("x")
        self.assertTrue(before <= msg.id <= int(time.time()) + 1)

    def test_text_drops_control_chars_and_trims(self):
        self.assertEqual(Message.text("  he\x07llo\n ").read_text(), "hello")

    def test_enter_trims_name(self):
        self.assertEqual(Message.enter("  bob ").data, b"bob")

    def test_invalid_utf8_reads_as_unknown(self):
        self.assertEqual(Message.build(Command.TEXT, b"\xff\xfe").read_text(), "UNKNOWN")

    def test_requested_id_pads_missing_bytes(self):
        self.assertEqual(Message.ask_to_repeat(42).requested_id(), 42)
        short = Message.build(Command.ASK_TO_REPEAT, b"\x01\x02")
        self.assertEqual(short.requested_id(), 0x01020000)
        self.assertEqual(Message.build(Command.ASK_TO_REPEAT).requested_id(), 0)

    def test_repeat_keeps_id(self):
        msg = Message.repeat(1234, "old text")
        self.assertEqual(msg.id, 1234)
        self.assertIs(msg.command, Command.REPEAT)
        self.assertEqual(msg.checksum, crc16(b"old text"))

    def test_repeat_does_not_clean_stored_text(self):
        self.assertEqual(Message.repeat(1, " a\tb\n").data, b" a\tb\n")


if __name__ == "__main__":
    unittest.main()

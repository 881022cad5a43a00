"""Regression tests for raw-key decoding and key registries.

Covers ESC timing, arrow and paging sequences, control-key token mapping, and
UTF-8 reassembly.
"""

import os
import time
import unittest

from lazytry import input as input_mod
from lazytry.input import KeyComboBinding, KeyComboRegistry, is_printable
from lazytry.input import reader


def read_from_bytes(data: bytes) -> list[str]:
    read_fd, write_fd = os.pipe()
    try:
        os.write(write_fd, data)
        keys: list[str] = []
        while True:
            key = input_mod.read_key(read_fd, timeout_ms=20)
            if key == "":
                break
            keys.append(key)
        return keys
    finally:
        os.close(read_fd)
        os.close(write_fd)


class ReadKeyRegressionTests(unittest.TestCase):
    def setUp(self) -> None:
        reader._PENDING_BYTES.clear()

    def tearDown(self) -> None:
        reader._PENDING_BYTES.clear()

    def test_single_escape_returns_esc_without_second_keypress(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            os.write(write_fd, b"\x1b")
            started = time.monotonic()
            key = input_mod.read_key(read_fd, timeout_ms=20)
            elapsed = time.monotonic() - started
        finally:
            os.close(read_fd)
            os.close(write_fd)

        self.assertEqual(key, "ESC")
        self.assertLess(elapsed, 0.2)

    def test_timeout_returns_empty_token(self) -> None:
        self.assertEqual(read_from_bytes(b""), [])

    def test_arrow_home_end_and_paging_sequences(self) -> None:
        keys = read_from_bytes(b"\x1b[A\x1b[B\x1b[H\x1b[F\x1b[5~\x1b[6~\x1bOA")
        self.assertEqual(keys, ["UP", "DOWN", "HOME", "END", "PAGE_UP", "PAGE_DOWN", "UP"])

    def test_control_keys(self) -> None:
        keys = read_from_bytes(b"\x03\x04\x07\x0b\x0e\x10\x14\x15\x17\x1f\t\x7f\r\n")
        self.assertEqual(
            keys,
            [
                "CTRL_C",
                "CTRL_D",
                "CTRL_G",
                "CTRL_K",
                "CTRL_N",
                "CTRL_P",
                "CTRL_T",
                "CTRL_U",
                "CTRL_W",
                "CTRL_QUESTION",
                "TAB",
                "BACKSPACE",
                "ENTER_CR",
                "ENTER_LF",
            ],
        )

    def test_tilde_home_and_end_variants(self) -> None:
        keys = read_from_bytes(b"\x1b[1~\x1b[4~\x1b[7~\x1b[8~\x1b[3~")
        self.assertEqual(keys, ["HOME", "END", "HOME", "END", "DELETE"])

    def test_unbound_sequences_are_unknown_not_escape(self) -> None:
        # F5, Ctrl-Right, Alt-Up, and SS3 F1.
        keys = read_from_bytes(b"\x1b[15~\x1b[1;5C\x1b[1;3A\x1bOP")
        self.assertEqual(keys, ["UNKNOWN"] * 4)
        self.assertNotIn("ESC", keys)

    def test_unknown_sequence_does_not_swallow_following_keys(self) -> None:
        self.assertEqual(read_from_bytes(b"\x1b[24~ab"), ["UNKNOWN", "a", "b"])

    def test_escape_followed_by_plain_key_keeps_the_key(self) -> None:
        self.assertEqual(read_from_bytes(b"\x1bx"), ["ESC", "x"])

    def test_printable_and_utf8_characters(self) -> None:
        self.assertEqual(read_from_bytes("aé?".encode("utf-8")), ["a", "é", "?"])


class KeyRegistryTests(unittest.TestCase):
    def test_dispatch_and_binding_lookup(self) -> None:
        calls: list[str] = []
        registry: KeyComboRegistry[str] = KeyComboRegistry().register_bindings(
            KeyComboBinding(("UP", "CTRL_P"), lambda: "up"),
            KeyComboBinding(("ESC",), lambda: calls.append("esc") or "esc"),
        )
        self.assertTrue(registry.is_bound("CTRL_P"))
        self.assertFalse(registry.is_bound("DOWN"))
        self.assertEqual(registry.dispatch("UP"), "up")
        self.assertEqual(registry.dispatch("ESC"), "esc")
        self.assertIsNone(registry.dispatch("DOWN"))
        self.assertEqual(calls, ["esc"])

    def test_normalizer_applies_to_registration_and_lookup(self) -> None:
        registry: KeyComboRegistry[int] = KeyComboRegistry(normalize=str.upper)
        registry.register_binding(KeyComboBinding(("ctrl_u",), lambda: 1))
        self.assertEqual(registry.dispatch("CTRL_U"), 1)

    def test_printable_is_ascii_only(self) -> None:
        self.assertTrue(is_printable("a"))
        self.assertTrue(is_printable("~"))
        self.assertFalse(is_printable("é"))
        self.assertFalse(is_printable("UP"))
        self.assertFalse(is_printable("\t"))


if __name__ == "__main__":
    unittest.main()

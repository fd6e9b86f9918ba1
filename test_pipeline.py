from __future__ import annotations

import logging
import os
import tempfile
import unittest
from pathlib import Path

from loaf import create, extract, is_envelope, verify
from loaf.cancel import CancellationToken
from loaf.constants import ENVELOPE_PREFIX
from loaf.envelope import format_envelope, parse_envelope
from loaf.source import BytesSource, FileSource


def _envelope(source, **kw) -> str:
    result = create(source, **kw)
    assert result.succeeded, "create failed"
    return result.payload


def _flip(ch: str) -> str:
    return "1" if ch == "0" else "0"


class CreateTests(unittest.TestCase):
    def test_hello_world(self):
        result = create("Hello, World!")
        self.assertTrue(result.succeeded)
        self.assertFalse(result.cancelled)
        env = result.payload
        self.assertTrue(env.startswith(ENVELOPE_PREFIX))
        self.assertEqual(env.count(" "), 1)
        self.assertNotIn("\n", env)
        self.assertNotIn("\r", env)
        self.assertTrue(env.isascii())
        self.assertTrue(is_envelope(env))

        self.assertEqual(tuple(verify(env)), (True, True))

        ok, blobs = extract(env)
        self.assertTrue(ok)
        self.assertEqual(len(blobs), 1)
        self.assertEqual(blobs[0].name, "-")
        self.assertEqual(blobs[0].data, "Hello, World!".encode("utf-8"))

    def test_hex_payload_even_and_lowercase(self):
        for text in ("", "a", "ab", "Hello, LoaF Archive!", "x" * 5000):
            with self.subTest(size=len(text)):
                env = parse_envelope(_envelope(text))
                self.assertEqual(len(env.payload) % 2, 0)
                self.assertEqual(env.payload, env.payload.lower())
                self.assertEqual(len(env.digest), 64)

    def test_deterministic_for_fixed_mtime(self):
        self.assertEqual(_envelope("same", mtime=1), _envelope("same", mtime=1))
        self.assertNotEqual(_envelope("same", mtime=1), _envelope("same", mtime=2))

    def test_file_source_uses_base_name(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "notes.txt"
            payload = os.urandom(3000)
            path.write_bytes(payload)
            for source in (path, FileSource(str(path))):
                ok, blobs = extract(_envelope(source))
                self.assertTrue(ok)
                self.assertEqual([(b.name, b.data) for b in blobs], [("notes.txt", payload)])

    def test_missing_file_fails(self):
        with tempfile.TemporaryDirectory() as tmp:
            result = create(Path(tmp) / "absent.bin")
        self.assertFalse(result.succeeded)
        self.assertFalse(result.cancelled)
        self.assertEqual(result.payload, "")

    def test_bytes_source(self):
        data = bytes(range(256))
        ok, blobs = extract(_envelope(data))
        self.assertTrue(ok)
        self.assertEqual(blobs[0].name, "-")
        self.assertEqual(blobs[0].data, data)

    def test_long_name_truncated(self):
        ok, blobs = extract(_envelope(BytesSource(b"z", name="n" * 120)))
        self.assertTrue(ok)
        self.assertEqual(blobs[0].name, "n" * 100)

    def test_unsupported_input_is_reported(self):
        with self.assertLogs("loaf.pipeline", level="ERROR"):
            result = create(12345)  # type: ignore[arg-type]
        self.assertFalse(result.succeeded)
        self.assertEqual(result.payload, "")

    def test_custom_logger(self):
        log = logging.getLogger("test.loaf.sink")
        with self.assertLogs(log, level="WARNING"):
            verify("junk", logger=log)


class RoundTripTests(unittest.TestCase):
    def test_text_roundtrip(self):
        samples = ["", " ", "Hello, World!", "héllo wörld ✓", "line1\nline2\r\n", "\x00\x01", "x" * 100_000]
        for text in samples:
            with self.subTest(size=len(text)):
                env = _envelope(text)
                self.assertEqual(tuple(verify(env)), (True, True))
                ok, blobs = extract(env)
                self.assertTrue(ok)
                self.assertEqual(len(blobs), 1)
                self.assertEqual(blobs[0].name, "-")
                self.assertEqual(blobs[0].data, text.encode("utf-8"))

    def test_random_binary_roundtrip(self):
        data = os.urandom(70_000)
        ok, blobs = extract(_envelope(data))
        self.assertTrue(ok)
        self.assertEqual(blobs[0].data, data)

    def test_surrounding_whitespace_tolerated(self):
        env = "  \n" + _envelope("padded") + "\r\n\t "
        self.assertEqual(tuple(verify(env)), (True, True))
        ok, blobs = extract(env)
        self.assertTrue(ok)
        self.assertEqual(blobs[0].data, b"padded")


class VerifyTests(unittest.TestCase):
    def test_invalid_format(self):
        result = verify("not a valid loaf format")
        self.assertFalse(result.succeeded)
        self.assertFalse(result.cancelled)

    def test_extra_digit_after_prefix(self):
        env = _envelope("test content").replace("SHA256(-)=", "SHA256(-)=0")
        self.assertEqual(tuple(verify(env)), (True, False))

    def test_short_digest(self):
        env = _envelope("test content")
        parsed = parse_envelope(env)
        short = f"SHA256(-)={parsed.digest[:63]} {parsed.payload}"
        self.assertEqual(tuple(verify(short)), (True, False))

    def test_tampered_digest_every_position(self):
        env = _envelope("tamper me")
        prefix = len(ENVELOPE_PREFIX)
        for i in range(64):
            pos = prefix + i
            tampered = env[:pos] + _flip(env[pos]) + env[pos + 1 :]
            with self.subTest(position=i):
                self.assertEqual(tuple(verify(tampered)), (True, False))

    def test_tampered_payload(self):
        env = _envelope("tamper me")
        tampered = env[:-1] + _flip(env[-1])
        self.assertEqual(tuple(verify(tampered)), (True, False))

    def test_uppercase_digest_is_not_parsable(self):
        env = _envelope("case")
        parsed = parse_envelope(env)
        upper = f"SHA256(-)={parsed.digest.upper()} {parsed.payload}"
        self.assertTrue(is_envelope(upper))
        self.assertFalse(verify(upper).succeeded)

    def test_non_string_input(self):
        result = verify(None)  # type: ignore[arg-type]
        self.assertFalse(result.succeeded)


class StructuralRejectionTests(unittest.TestCase):
    BAD = [
        "",
        "   ",
        "not a valid loaf format",
        "invalid format",
        "SHA256(-)=",
        "SHA256(-)=abc123",
        "sha256(-)=" + "a" * 64 + " 00",
        "SHA256(-)=" + "A" * 64 + " 00",
        "SHA256(-)=" + "a" * 64 + "\n00",
        "MD5(-)=" + "a" * 32 + " 00",
    ]

    def test_verify_and_extract_fail(self):
        for text in self.BAD:
            with self.subTest(text=text):
                v = verify(text)
                self.assertFalse(v.succeeded)
                e = extract(text)
                self.assertFalse(e.succeeded)
                self.assertEqual(e.payload, [])


class ExtractTests(unittest.TestCase):
    def test_odd_length_payload(self):
        env = _envelope("odd")
        with self.assertLogs("loaf.pipeline", level="WARNING") as cm:
            result = extract(env[:-1])
        self.assertFalse(result.succeeded)
        self.assertEqual(result.payload, [])
        self.assertTrue(any("odd length" in line for line in cm.output))

    def test_non_hex_payload(self):
        result = extract("SHA256(-)=" + "a" * 64 + " zz")
        self.assertEqual((result.succeeded, result.payload), (False, []))

    def test_not_gzip(self):
        result = extract(format_envelope("00ff00ff"))
        self.assertEqual((result.succeeded, result.payload), (False, []))

    def test_does_not_check_digest(self):
        parsed = parse_envelope(_envelope("trusting"))
        forged = f"SHA256(-)={'0' * 64} {parsed.payload}"
        self.assertEqual(tuple(verify(forged)), (True, False))
        ok, blobs = extract(forged)
        self.assertTrue(ok)
        self.assertEqual(blobs[0].data, b"trusting")

    def test_digest_length_irrelevant(self):
        parsed = parse_envelope(_envelope("short"))
        ok, blobs = extract(f"SHA256(-)=ab {parsed.payload}")
        self.assertTrue(ok)
        self.assertEqual(blobs[0].data, b"short")

    def test_empty_payload_does_not_survive_trimming(self):
        # the separator space is trailing whitespace once the payload is empty
        result = extract(format_envelope(""))
        self.assertEqual((result.succeeded, result.payload), (False, []))


class CancellationTests(unittest.TestCase):
    def _cancelled(self) -> CancellationToken:
        token = CancellationToken()
        token.cancel()
        return token

    def test_create(self):
        result = create("abc", token=self._cancelled())
        self.assertTrue(result.cancelled)
        self.assertFalse(result.succeeded)
        self.assertEqual(result.payload, "")

    def test_verify(self):
        result = verify(_envelope("abc"), token=self._cancelled())
        self.assertTrue(result.cancelled)
        self.assertFalse(result.succeeded)

    def test_extract(self):
        result = extract(_envelope("abc"), token=self._cancelled())
        self.assertTrue(result.cancelled)
        self.assertEqual(result.payload, [])

    def test_cancellation_is_not_an_error(self):
        log = logging.getLogger("test.loaf.cancel")
        log.setLevel(logging.DEBUG)
        with self.assertLogs(log, level="DEBUG") as cm:
            create("abc", token=self._cancelled(), logger=log)
        self.assertTrue(all(rec.levelno == logging.DEBUG for rec in cm.records))

    def test_live_token_does_not_interfere(self):
        token = CancellationToken()
        env = create("abc", token=token)
        self.assertTrue(env.succeeded)
        self.assertEqual(tuple(verify(env.payload, token=token)), (True, True))
        self.assertTrue(extract(env.payload, token=token).succeeded)


if __name__ == "__main__":
    unittest.main()

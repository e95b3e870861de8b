from __future__ import annotations

import errno
import io
import lzma
import os
import unittest
from pathlib import Path

from tarpack.codec import Codec, detect_compression, get_codec, guess_compression
from tarpack.constants import Compression
from tarpack.errors import CodecError, TarpackError, UnknownCompressionError


PAYLOAD = b"hello world\n" * 200 + os.urandom(512)
ALL_TAGS = [Compression.NONE, Compression.GZIP, Compression.BZIP2, Compression.LZMA]


class _FailingSource(io.RawIOBase):
    def readable(self):
        return True

    def readinto(self, b):
        raise OSError(errno.EIO, "device read failed")


class GuessCompressionTests(unittest.TestCase):
    def test_known_extensions(self):
        cases = {
            "x.tar.gz": Compression.GZIP,
            "x.tar.gzip": Compression.GZIP,
            "x.tgz": Compression.GZIP,
            "x.tar.bz2": Compression.BZIP2,
            "x.tar.bzip2": Compression.BZIP2,
            "x.tbz2": Compression.BZIP2,
            "x.tar.xz": Compression.LZMA,
            "x.tar.lzma": Compression.LZMA,
            "x.txz": Compression.LZMA,
            "x.tar": Compression.NONE,
            "x": Compression.NONE,
            "x.zip": Compression.NONE,
        }
        for name, expected in cases.items():
            with self.subTest(name=name):
                self.assertEqual(guess_compression(name), expected)

    def test_case_insensitive(self):
        self.assertEqual(guess_compression("X.TAR.GZ"), Compression.GZIP)
        self.assertEqual(guess_compression("x.tar.Bz2"), Compression.BZIP2)
        self.assertEqual(guess_compression("x.tar.XZ"), Compression.LZMA)
        self.assertEqual(guess_compression("x.TAR"), Compression.NONE)

    def test_only_final_suffix_counts(self):
        self.assertEqual(guess_compression("backup.gz.tar"), Compression.NONE)
        self.assertEqual(guess_compression(os.path.join("dir.gz", "file")), Compression.NONE)

    def test_path_objects(self):
        self.assertEqual(guess_compression(Path("out") / "x.tar.xz"), Compression.LZMA)


class CompressionParseTests(unittest.TestCase):
    def test_members_ints_and_names(self):
        self.assertIs(Compression.parse(Compression.GZIP), Compression.GZIP)
        self.assertIs(Compression.parse(2), Compression.BZIP2)
        self.assertIs(Compression.parse("xz"), Compression.LZMA)
        self.assertIs(Compression.parse(" GZ "), Compression.GZIP)
        self.assertIs(Compression.parse("none"), Compression.NONE)

    def test_unknown_values(self):
        for bad in (7, -1, "zip", "", True, 1.0, None):
            with self.subTest(value=bad):
                with self.assertRaises(UnknownCompressionError):
                    Compression.parse(bad)

    def test_unknown_is_value_error(self):
        with self.assertRaises(ValueError):
            get_codec(42)
        self.assertTrue(issubclass(UnknownCompressionError, TarpackError))


class CodecTests(unittest.TestCase):
    def test_roundtrip_each_codec(self):
        for tag in ALL_TAGS:
            with self.subTest(codec=tag.name):
                codec = Codec(tag)
                packed = codec.compress(PAYLOAD)
                self.assertEqual(codec.decompress(packed), PAYLOAD)
                if tag == Compression.NONE:
                    self.assertEqual(packed, PAYLOAD)
                else:
                    self.assertLess(len(packed), len(PAYLOAD))

    def test_output_is_deterministic(self):
        for tag in ALL_TAGS:
            with self.subTest(codec=tag.name):
                self.assertEqual(Codec(tag).compress(PAYLOAD), Codec(tag).compress(PAYLOAD))

    def test_level_override(self):
        self.assertEqual(Codec(Compression.GZIP).level, 9)
        fast = Codec(Compression.GZIP, level=1)
        self.assertEqual(fast.level, 1)
        self.assertEqual(fast.decompress(fast.compress(PAYLOAD)), PAYLOAD)
        self.assertIsNone(Codec(Compression.NONE).level)

    def test_writer_leaves_sink_open(self):
        for tag in ALL_TAGS:
            with self.subTest(codec=tag.name):
                out = io.BytesIO()
                written = Codec(tag).write_all(out, PAYLOAD)
                self.assertEqual(written, len(PAYLOAD))
                self.assertFalse(out.closed)
                self.assertTrue(out.getvalue())

    def test_reader_leaves_source_open(self):
        for tag in ALL_TAGS:
            with self.subTest(codec=tag.name):
                src = io.BytesIO(Codec(tag).compress(PAYLOAD))
                self.assertEqual(Codec(tag).read_all(src), PAYLOAD)
                self.assertFalse(src.closed)

    def test_empty_input(self):
        for tag in ALL_TAGS:
            with self.subTest(codec=tag.name):
                codec = Codec(tag)
                self.assertEqual(codec.decompress(codec.compress(b"")), b"")

    def test_garbage_raises_codec_error(self):
        for tag in (Compression.GZIP, Compression.BZIP2, Compression.LZMA):
            with self.subTest(codec=tag.name):
                with self.assertRaises(CodecError):
                    Codec(tag).decompress(b"definitely not a compressed stream" * 4)

    def test_truncated_raises_codec_error(self):
        for tag in (Compression.GZIP, Compression.BZIP2, Compression.LZMA):
            with self.subTest(codec=tag.name):
                packed = Codec(tag).compress(PAYLOAD)
                with self.assertRaises(CodecError):
                    Codec(tag).decompress(packed[: len(packed) // 2])

    def test_source_io_error_is_not_codec_error(self):
        for tag in ALL_TAGS:
            with self.subTest(codec=tag.name):
                with self.assertRaises(OSError) as ctx:
                    Codec(tag).read_all(_FailingSource())
                self.assertNotIsInstance(ctx.exception, CodecError)
                self.assertEqual(ctx.exception.errno, errno.EIO)

    def test_lzma_reader_accepts_legacy_format(self):
        legacy = lzma.compress(PAYLOAD, format=lzma.FORMAT_ALONE)
        self.assertEqual(Codec(Compression.LZMA).decompress(legacy), PAYLOAD)
        self.assertEqual(detect_compression(legacy), Compression.LZMA)

    def test_get_codec_accepts_aliases(self):
        self.assertEqual(get_codec("bz2").compression, Compression.BZIP2)
        self.assertEqual(get_codec(3).name, "lzma")


class DetectCompressionTests(unittest.TestCase):
    def test_detects_codec_output(self):
        for tag in ALL_TAGS:
            with self.subTest(codec=tag.name):
                self.assertEqual(detect_compression(Codec(tag).compress(PAYLOAD)), tag)

    def test_short_and_empty_input(self):
        self.assertEqual(detect_compression(b""), Compression.NONE)
        self.assertEqual(detect_compression(b"BZh"), Compression.NONE)
        self.assertEqual(detect_compression(b"\x1f"), Compression.NONE)


if __name__ == "__main__":
    unittest.main()

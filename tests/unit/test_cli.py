import io
import json
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "apps" / "cli"))
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from gifmoji_app.cli import build_parser, main


class CliParserTests(unittest.TestCase):
    def test_export_command(self):
        args = build_parser().parse_args(["export", "--text", "OMG", "--animation", "spin", "--preset", "banner"])
        self.assertEqual(args.command, "export")
        self.assertEqual(args.text, "OMG")
        self.assertEqual(args.animation, "spin")
        self.assertEqual(args.preset, "banner")
        self.assertIsNone(args.transparent)

    def test_transparent_toggle(self):
        args = build_parser().parse_args(["export", "--no-transparent"])
        self.assertFalse(args.transparent)

    def test_frame_requires_out(self):
        with self.assertRaises(SystemExit), redirect_stdout(io.StringIO()), mock.patch("sys.stderr", io.StringIO()):
            build_parser().parse_args(["frame"])

    def test_rejects_unknown_animation(self):
        with self.assertRaises(SystemExit), mock.patch("sys.stderr", io.StringIO()):
            build_parser().parse_args(["export", "--animation", "wobble"])

    def test_preview_command(self):
        args = build_parser().parse_args(["preview", "--seconds", "0.5", "--pattern", "heart"])
        self.assertEqual(args.command, "preview")
        self.assertEqual(args.seconds, 0.5)
        self.assertEqual(args.pattern, "heart")


class CliRunTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.home = Path(self._tmp.name)
        patcher = mock.patch.dict(os.environ, {"GIFMOJI_HOME": str(self.home)})
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)

    def run_cli(self, argv):
        out = io.StringIO()
        with redirect_stdout(out):
            rc = main(argv)
        return rc, json.loads(out.getvalue())

    def test_presets_lists_sizes(self):
        rc, payload = self.run_cli(["presets"])
        self.assertEqual(rc, 0)
        self.assertIn({"id": "reaction", "label": "Reaction (128x128)", "width": 128, "height": 128}, payload)

    def test_export_writes_gif(self):
        out = self.home / "out.gif"
        rc, payload = self.run_cli(["export", "--text", "HI\\nYOU", "--width", "48", "--height", "48", "--duration", "0.5", "--out", str(out)])
        self.assertEqual(rc, 0)
        self.assertTrue(payload["success"])
        self.assertEqual(payload["frames"], 10)
        self.assertEqual(payload["size"], [48, 48])
        self.assertTrue(out.read_bytes().startswith(b"GIF8"))

    def test_export_uses_generated_name(self):
        rc, payload = self.run_cli(["export", "--text", "Yes", "--width", "32", "--height", "32", "--duration", "0.25", "--out-dir", str(self.home)])
        self.assertEqual(rc, 0)
        name = Path(payload["path"]).name
        self.assertTrue(name.startswith("reaction-yes-32x32-"))
        self.assertTrue(name.endswith(".gif"))

    def test_frame_writes_png(self):
        out = self.home / "frame.png"
        rc, payload = self.run_cli(["frame", "--width", "40", "--height", "40", "--t", "0.25", "--out", str(out)])
        self.assertEqual(rc, 0)
        self.assertEqual(payload["t"], 0.25)
        self.assertTrue(out.read_bytes().startswith(b"\x89PNG"))

    def test_invalid_text_reports_error(self):
        rc, payload = self.run_cli(["export", "--text", "X" * 31, "--out", str(self.home / "x.gif")])
        self.assertEqual(rc, 2)
        self.assertFalse(payload["success"])
        self.assertFalse((self.home / "x.gif").exists())


if __name__ == "__main__":
    unittest.main()

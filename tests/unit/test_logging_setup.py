import io
import json
import logging
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from gifmoji_core.logging_setup import JsonFormatter, get_logger
from gifmoji_core.sequencer import export_animation
from gifmoji_renderer import StyleConfig


class NullCodec:
    def quantize(self, pixels, width, height, max_colors=256, transparent=False):
        return [(0, 0, 0), (255, 255, 255)]

    def apply_palette(self, pixels, width, height, palette, transparent=False):
        return bytes(width * height)

    def write_frame(self, index, width, height, palette, delay_ms, transparent=False):
        pass

    def finish(self):
        pass

    def bytes(self):
        return b"GIF89a"


class JsonFormatterTests(unittest.TestCase):
    def test_context_fields_are_serialized(self):
        record = logging.LogRecord("gifmoji", logging.INFO, __file__, 1, "export done", None, None)
        record.event = "export_done"
        record.frames = 40
        record.bytes = 1234
        record.elapsed_s = 0.5
        payload = json.loads(JsonFormatter().format(record))
        self.assertEqual(payload["msg"], "export done")
        self.assertEqual(payload["event"], "export_done")
        self.assertEqual(payload["frames"], 40)
        self.assertEqual(payload["bytes"], 1234)
        self.assertEqual(payload["elapsed_s"], 0.5)
        self.assertNotIn("size", payload)

    def test_export_events_carry_frame_counts(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JsonFormatter())
        logger = get_logger()
        previous_level = logger.level
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        self.addCleanup(logger.removeHandler, handler)
        self.addCleanup(logger.setLevel, previous_level)

        export_animation(StyleConfig(text="GO", width=24, height=24, duration_seconds=0.1), codec=NullCodec())

        events = [json.loads(line) for line in stream.getvalue().splitlines()]
        by_event = {}
        for entry in events:
            by_event.setdefault(entry["event"], []).append(entry)
        self.assertEqual(by_event["export_start"][0]["size"], [24, 24])
        self.assertEqual([e["frame"] for e in by_event["export_frame"]], [1, 2])
        done = by_event["export_done"][0]
        self.assertEqual(done["frames"], 2)
        self.assertEqual(done["bytes"], len(b"GIF89a"))
        self.assertIn("elapsed_s", done)


if __name__ == "__main__":
    unittest.main()

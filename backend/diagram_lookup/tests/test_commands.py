"""
Tests for the lookup_diagrams management command.

The Commons client, cache and refiner are patched so the command runs the
real aggregator without network calls.

Run with: python -m pytest diagram_lookup/tests/test_commands.py -v
"""
import json
import unittest
from io import StringIO
from typing import Any, Dict, List
from unittest.mock import MagicMock, patch

from django.core.management import call_command
from django.core.management.base import CommandError

from diagram_lookup.errors import UpstreamTimeout
from diagram_lookup.services.cache import ResultCache


def make_page(name: str, description: str = "") -> Dict[str, Any]:
    return {
        "title": f"File:{name}",
        "imageinfo": [{
            "url": f"https://upload.example/{name}",
            "mime": "image/png",
            "extmetadata": {
                "Artist": {"value": "Ann"},
                "LicenseShortName": {"value": "CC BY-SA 4.0"},
                "License": {"value": "cc-by-sa-4.0"},
                "ImageDescription": {"value": description},
            },
        }],
    }


class FakeCommonsClient:

    def __init__(self, responses: Dict[str, Any]):
        self.responses = responses
        self.calls: List[str] = []

    def search(self, query: str) -> List[Dict[str, Any]]:
        self.calls.append(query)
        result = self.responses.get(query, [])
        if isinstance(result, Exception):
            raise result
        return result


class TestLookupDiagramsCommand(unittest.TestCase):

    def setUp(self) -> None:
        self.client = FakeCommonsClient({
            "human heart": [make_page("Heart.png", "human heart anatomy"), make_page("Valve.png")],
            "heart anatomy": [make_page("Chambers.png", "heart anatomy")],
        })
        self.refiner = MagicMock()
        self.refiner.refine.return_value = "heart anatomy"

        patchers = [
            patch("diagram_lookup.pipelines.aggregator.get_commons_client", return_value=self.client),
            patch(
                "diagram_lookup.pipelines.aggregator.get_result_cache",
                side_effect=lambda: ResultCache(ttl_seconds=60, namespace="test"),
            ),
            patch(
                "diagram_lookup.management.commands.lookup_diagrams.get_query_refiner",
                return_value=self.refiner,
            ),
        ]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)

    def run_command(self, *args) -> str:
        out = StringIO()
        call_command("lookup_diagrams", *args, stdout=out)
        return out.getvalue()

    def test_json_without_refinement(self):
        output = self.run_command("human heart", "--json", "--no-refine")

        data = json.loads(output)
        self.refiner.refine.assert_not_called()
        self.assertEqual(self.client.calls, ["human heart"])
        self.assertEqual(data["query"], "human heart")
        self.assertEqual(data["total"], 2)
        self.assertEqual(
            [image["fullUrl"] for image in data["images"]],
            ["https://upload.example/Heart.png", "https://upload.example/Valve.png"],
        )
        self.assertEqual(data["images"][0]["author"], "Ann")
        self.assertIn("ts", data)

    def test_json_with_refinement(self):
        output = self.run_command("Why does the heart beat?", "--json")

        data = json.loads(output)
        self.refiner.refine.assert_called_once_with("Why does the heart beat?")
        self.assertEqual(self.client.calls, ["heart anatomy"])
        self.assertEqual(data["query"], "Why does the heart beat?")
        self.assertEqual(data["images"][0]["title"], "Chambers.png")

    def test_plain_text_listing(self):
        output = self.run_command("human heart", "--no-refine")

        lines = output.splitlines()
        self.assertEqual(lines[0], "2 images for 'human heart'")
        self.assertEqual(lines[1], "1. Heart.png")
        self.assertEqual(lines[2].strip(), "https://upload.example/Heart.png")
        self.assertIn("2. Valve.png", lines)

    def test_every_search_failing_raises_command_error(self):
        self.client.responses = {
            "volcano": UpstreamTimeout("slow"),
            "volcano (diagram OR schematic OR illustration)": UpstreamTimeout("slow"),
        }
        with self.assertRaises(CommandError) as ctx:
            self.run_command("volcano", "--no-refine")
        self.assertTrue(str(ctx.exception).startswith("aggregation_failure:"))


if __name__ == '__main__':
    unittest.main()

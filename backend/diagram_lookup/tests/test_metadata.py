"""
Unit tests for diagram_lookup/services/metadata.py

Run with: python -m pytest diagram_lookup/tests/test_metadata.py -v
"""
import unittest

from diagram_lookup.services.metadata import description_from_metadata, extract_metadata


def field(value):
    return {"value": value, "source": "commons-desc-page"}


class TestExtractMetadata(unittest.TestCase):
    """Tests for attribution field precedence."""

    def test_prefers_artist_over_author_and_creator(self):
        meta = extract_metadata({
            "Artist": field("Ann Artist"),
            "Author": field("Bob Author"),
            "Creator": field("Cy Creator"),
        })
        self.assertEqual(meta["author"], "Ann Artist")

    def test_falls_back_to_author_then_creator(self):
        self.assertEqual(
            extract_metadata({"Author": field("Bob"), "Creator": field("Cy")})["author"],
            "Bob",
        )
        self.assertEqual(extract_metadata({"Creator": field("Cy")})["author"], "Cy")

    def test_license_precedence(self):
        meta = extract_metadata({
            "License": field("cc-by-sa-4.0"),
            "Copyright": field("Public domain"),
        })
        self.assertEqual(meta["license"], "cc-by-sa-4.0")
        self.assertEqual(
            extract_metadata({"Copyright": field("Public domain")})["license"],
            "Public domain",
        )

    def test_license_url_when_present(self):
        meta = extract_metadata({
            "License_url": field("https://creativecommons.org/licenses/by-sa/4.0"),
        })
        self.assertEqual(meta["license_url"], "https://creativecommons.org/licenses/by-sa/4.0")

    def test_defaults_for_missing_fields(self):
        """Missing or malformed blocks should yield sentinel values."""
        for extmeta in (None, {}, "not a dict", {"Artist": "bare string"}):
            meta = extract_metadata(extmeta)
            self.assertEqual(meta, {
                "author": "Unknown",
                "license": "Unknown license",
                "license_url": "",
            })

    def test_blank_values_count_as_absent(self):
        meta = extract_metadata({"Artist": field("   "), "Author": field("Bob")})
        self.assertEqual(meta["author"], "Bob")


class TestDescription(unittest.TestCase):

    def test_reads_image_description(self):
        self.assertEqual(
            description_from_metadata({"ImageDescription": field("Structure of a cell")}),
            "Structure of a cell",
        )

    def test_empty_when_missing(self):
        self.assertEqual(description_from_metadata(None), "")
        self.assertEqual(description_from_metadata({}), "")


if __name__ == '__main__':
    unittest.main()

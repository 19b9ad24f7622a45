"""
Unit tests for candidate query expansion, keyword extraction and scoring.

Run with: python -m pytest diagram_lookup/tests/test_queries.py -v
"""
import unittest

from diagram_lookup.utils.keywords import extract_keywords, score_image
from diagram_lookup.utils.queries import build_candidate_queries, build_fallback_query


class TestBuildCandidateQueries(unittest.TestCase):

    def test_single_concept(self):
        self.assertEqual(build_candidate_queries("quadratic equation"), ["quadratic equation"])

    def test_comma_segments_follow_full_query(self):
        self.assertEqual(
            build_candidate_queries("mitochondria, cell structure"),
            ["mitochondria, cell structure", "mitochondria", "cell structure"],
        )

    def test_skips_empty_and_duplicate_segments(self):
        self.assertEqual(
            build_candidate_queries("atom, , atom,nucleus"),
            ["atom, , atom,nucleus", "atom", "nucleus"],
        )

    def test_fallback_query_adds_diagram_terms(self):
        self.assertEqual(
            build_fallback_query("heart"),
            "heart (diagram OR schematic OR illustration)",
        )


class TestExtractKeywords(unittest.TestCase):

    def test_drops_short_tokens_and_stop_words(self):
        keywords = extract_keywords("The structure of an atom in DNA")
        self.assertEqual(keywords, ["structure", "atom", "dna"])

    def test_splits_on_commas_and_dedupes(self):
        keywords = extract_keywords("mitochondria, cell structure, Cell")
        self.assertEqual(keywords, ["mitochondria", "cell", "structure"])

    def test_custom_stop_words(self):
        keywords = extract_keywords("black holes and hole theory", stop_words=["holes", "hole", "and"])
        self.assertEqual(keywords, ["black", "theory"])

    def test_domain_terms_are_kept_by_default(self):
        self.assertIn("holes", extract_keywords("black holes"))

    def test_handles_empty_string(self):
        self.assertEqual(extract_keywords(""), [])


class TestScoreImage(unittest.TestCase):

    def test_counts_substring_matches(self):
        score = score_image(["cell", "membrane", "atom"], "Cell_membrane_detailed.svg")
        self.assertEqual(score, 2)

    def test_description_counts(self):
        score = score_image(["mitochondria"], "Figure 3.png", "Diagram of Mitochondria")
        self.assertEqual(score, 1)

    def test_zero_without_matches(self):
        self.assertEqual(score_image(["quantum"], "Heart.jpg", "human heart"), 0)


if __name__ == '__main__':
    unittest.main()

"""
Diagram lookup for student questions.

This package turns a question into ranked Wikimedia Commons images:
1. Optional query refinement through a text service
2. Candidate query expansion
3. Sequential Commons searches with a diagram-biased fallback
4. Keyword scoring and ranking
5. Time-boxed result caching
"""

"""
Query refinement - turns a student's question into a short image search phrase.

Refinement is best effort. Every refiner returns None instead of raising so
a slow or broken text service only costs the lookup its refined query.
"""
import json
import logging
from typing import Any, Optional

import requests

from diagram_lookup.config import config
from diagram_lookup.errors import DiagramLookupError
from diagram_lookup.utils.http import deadline_after, read_json

logger = logging.getLogger(__name__)

MIN_PHRASE_LENGTH = 2

REFINER_SYSTEM_PROMPT = """You help students find diagrams on Wikimedia Commons.

Given a student question, respond with a JSON object containing one field:

"image_query": 3-5 concise search keywords optimized for Wikimedia Commons to fetch a relevant diagram for the topic. Use specific, technical terms that Wikimedia Commons would have (e.g., "quadratic equation", "human heart anatomy", "photosynthesis process", "mitochondria structure"). Avoid generic words like "diagram", "image", "picture". Separate distinct concepts with commas.

Respond ONLY with the JSON object, no markdown and no extra text."""


def clean_phrase(value: Any) -> Optional[str]:
    """Return the trimmed phrase, or None when it is unusable."""
    if not isinstance(value, str):
        return None
    phrase = value.strip()
    if len(phrase) < MIN_PHRASE_LENGTH:
        return None
    return phrase


class QueryRefiner:
    """Capability interface: ``refine(question) -> Optional[str]``"""

    kind = "base"

    def refine(self, question: str) -> Optional[str]:
        raise NotImplementedError


class NullQueryRefiner(QueryRefiner):
    """Used when no text service is configured"""

    kind = "none"

    def refine(self, question: str) -> Optional[str]:
        return None


class OpenAIQueryRefiner(QueryRefiner):
    """Asks an OpenAI chat model for an ``image_query`` phrase"""

    kind = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Any = None,
    ):
        self.model = config.refiner_model if model is None else model
        self.timeout = config.refiner_timeout if timeout is None else timeout
        if client is None:
            from openai import OpenAI
            client = OpenAI(
                api_key=config.openai_api_key if api_key is None else api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        self.client = client

    def refine(self, question: str) -> Optional[str]:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": REFINER_SYSTEM_PROMPT},
                    {"role": "user", "content": f'Student Question: "{question}"'},
                ],
                response_format={"type": "json_object"},
                temperature=0.2,
                max_tokens=100,
                timeout=self.timeout,
            )
            content = response.choices[0].message.content or ""
            data = json.loads(content)
        except Exception as e:
            logger.warning(f"Query refinement via OpenAI failed: {e}")
            return None

        if not isinstance(data, dict):
            return None
        return clean_phrase(data.get("image_query"))


class AskServiceQueryRefiner(QueryRefiner):
    """POSTs the question to a remote ask service and reads ``image_query``"""

    kind = "ask_service"

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = config.ask_service_url if url is None else url
        self.timeout = config.refiner_timeout if timeout is None else timeout
        self.session = requests.Session() if session is None else session

    def refine(self, question: str) -> Optional[str]:
        deadline = deadline_after(self.timeout)
        try:
            response = self.session.post(
                self.url,
                json={"question": question},
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
                stream=True,
            )
        except requests.RequestException as e:
            logger.warning(f"Ask service request failed: {e}")
            return None

        if not response.ok:
            response.close()
            logger.warning(f"Ask service returned status {response.status_code}")
            return None

        try:
            data = read_json(response, deadline)
        except DiagramLookupError as e:
            logger.warning(f"Ask service body unusable ({e.category}): {e}")
            return None

        if not isinstance(data, dict):
            return None
        return clean_phrase(data.get("image_query"))


# Global singleton
_query_refiner: Optional[QueryRefiner] = None


def build_query_refiner() -> QueryRefiner:
    """Pick a refiner from configuration"""
    if config.ask_service_url:
        return AskServiceQueryRefiner()
    if config.openai_api_key:
        try:
            return OpenAIQueryRefiner()
        except Exception as e:
            logger.error(f"Failed to initialize OpenAI client: {e}")
    return NullQueryRefiner()


def get_query_refiner() -> QueryRefiner:
    """Get or create the global query refiner"""
    global _query_refiner
    if _query_refiner is None:
        _query_refiner = build_query_refiner()
    return _query_refiner

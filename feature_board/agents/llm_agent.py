# feature_board/agents/llm_agent.py
from openai import OpenAI, RateLimitError
from typing import List, Optional
from feature_board.config import constants
from feature_board.config.settings import Settings
from feature_board.errors import BackendUnavailableError
from feature_board.models.schemas import FeedbackItem, InsightGenerationResult, TagGenerationResult
import json
import re
import time
import logging

logger = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(r'```(?:json)?\s*|\s*```')


class ChatAgent:
    """OpenAI Chatbot client."""

    def __init__(self, config: Settings):
        self.config = config
        self.client = OpenAI(api_key=config.openai_api_key) if config.openai_api_key else None
        self.model = config.openai_llm_model

    def chat(self, messages: List[dict]) -> str:
        """
        Send a list of messages to the OpenAI chat model and get the response.
        Uses exponential backoff retry logic for rate limit errors.

        Args:
            messages: List of message dicts (e.g., [{"role": "user", "content": "Hello"}])

        Returns:
            The assistant's reply as a string.

        Raises:
            BackendUnavailableError: no API key is configured
        """
        if self.client is None:
            raise BackendUnavailableError("OPENAI_API_KEY is not configured")

        max_retries = 5
        base_delay = 1.0  # Start with 1 second delay

        for attempt in range(max_retries):
            try:
                response = self.client.chat.completions.create(
                    model=self.model,
                    messages=messages
                )
                return response.choices[0].message.content or ""
            except RateLimitError:
                if attempt == max_retries - 1:
                    raise

                delay = base_delay * (2 ** attempt)
                logger.warning(f"Rate limit hit on chat completion. Retrying in {delay}s... (attempt {attempt + 1}/{max_retries})")
                time.sleep(delay)

    def chat_single(self, prompt: str) -> str:
        """
        Send a single prompt to the OpenAI chat model and get the response.

        Args:
            prompt: The user's prompt as a string.

        Returns:
            The assistant's reply as a string.
        """
        messages = [{"role": "user", "content": prompt}]
        return self.chat(messages)


class FeedbackTagger:
    """Suggest short category tags for a feature request."""

    def __init__(self, config: Settings, agent: Optional[ChatAgent] = None):
        self.agent = agent or ChatAgent(config)
        self.preferred_tags = list(constants.PREFERRED_TAGS)

    def generate_tags(self, title: str, description: str) -> TagGenerationResult:
        """
        Generate up to four tags for one feedback item. Never raises.

        Args:
            title: Feedback title
            description: Feedback description

        Returns:
            TagGenerationResult; success=False carries the error message
        """
        preferred = ", ".join(self.preferred_tags)
        prompt = f"""Analyze this feedback and generate 2-4 relevant tags that categorize the request.

            Title: "{title}"
            Description: "{description}"

            Instructions:
            - Return ONLY a JSON array of strings (e.g., ["UI/UX", "Performance", "Feature Request"])
            - Use these categories when relevant: {preferred}
            - Create new categories if none fit well, but prefer existing ones
            - Tags should be 1-3 words maximum
            - Focus on the PRIMARY purpose and technical area

            Example response: ["Feature Request", "Export", "Analytics"]

            Response (JSON array only):"""

        try:
            response = self.agent.chat_single(prompt).strip()
        except Exception as e:
            logger.error(f"Tag generation failed for '{title[:50]}': {e}")
            return TagGenerationResult(success=False, tags=[], error=str(e))

        tags = self._clean(self._parse_tags(response))
        logger.debug(f"Generated tags for '{title[:50]}': {tags}")
        return TagGenerationResult(success=True, tags=tags)

    def _parse_tags(self, response: str) -> List:
        """Parse LLM response as a tag list with multiple fallback strategies."""
        # Strategy 1: Direct JSON parsing
        try:
            tags = json.loads(FENCE_PATTERN.sub('', response).strip())
            if isinstance(tags, list):
                return tags
        except json.JSONDecodeError:
            pass

        # Strategy 2: Extract array from text
        match = re.search(r'\[.*?\]', response, re.DOTALL)
        if match:
            try:
                tags = json.loads(match.group(0))
                if isinstance(tags, list):
                    return tags
            except json.JSONDecodeError:
                pass

        # Strategy 3: Any quoted strings
        quoted = re.findall(r'"([^"]+)"', response)
        if quoted:
            return quoted

        logger.warning(f"Could not parse tags from response, using fallback: {response[:100]}")
        return [constants.FALLBACK_TAG]

    @staticmethod
    def _clean(tags: List) -> List[str]:
        cleaned = [t.strip() for t in tags if isinstance(t, str) and t.strip()]
        return cleaned[:constants.MAX_AI_TAGS]


class InsightAgent:
    """Summarise a theme of related feature requests."""

    def __init__(self, config: Settings, agent: Optional[ChatAgent] = None):
        self.agent = agent or ChatAgent(config)

    def generate_insight(self, theme: str, items: List[FeedbackItem]) -> InsightGenerationResult:
        """
        Ask the model for a summary and a 1-10 priority for one theme. Never raises.

        Args:
            theme: Shared primary tag of the items
            items: Feedback items in the theme

        Returns:
            InsightGenerationResult; success=False when the call fails or the
            reply is not the expected JSON object
        """
        total_votes = sum(item.votes for item in items)
        details = "\n\n".join(
            f'{i + 1}. "{item.title}" ({item.votes} votes)\n   {item.description[:200]}'
            for i, item in enumerate(items)
        )
        prompt = f"""Analyze this group of feature requests and generate a strategic insight.

            Theme: "{theme}"
            Total Feedback Items: {len(items)}
            Total Votes: {total_votes}

            Feedback Details:
            {details}

            Instructions:
            - Generate ONE concise insight (2-3 sentences max) that identifies the core user need
            - Assign a priority score from 1-10 based on vote count, frequency, and strategic importance
            - Focus on actionable business value, not just technical implementation

            Return ONLY this JSON format:
            {{
            "insight": "A concise insight about the user need and business opportunity",
            "priorityScore": 7,
            "reasoning": "Brief explanation of the priority score"
            }}

            Response (JSON only):"""

        try:
            response = self.agent.chat_single(prompt).strip()
        except Exception as e:
            logger.error(f"Insight generation failed for theme '{theme}': {e}")
            return InsightGenerationResult(success=False, error=str(e))

        data = self._parse_object(response)
        if data is None or not isinstance(data.get("insight"), str) or not data["insight"].strip():
            logger.warning(f"Unparseable insight response for theme '{theme}': {response[:100]}")
            return InsightGenerationResult(success=False, error="Unparseable insight response")

        score = data.get("priorityScore")
        return InsightGenerationResult(
            success=True,
            insight_summary=data["insight"].strip(),
            priority_score=score if isinstance(score, (int, float)) and not isinstance(score, bool) else None,
            reasoning=data.get("reasoning") if isinstance(data.get("reasoning"), str) else None,
        )

    @staticmethod
    def _parse_object(response: str) -> Optional[dict]:
        try:
            data = json.loads(FENCE_PATTERN.sub('', response).strip())
            if isinstance(data, dict):
                return data
        except json.JSONDecodeError:
            pass

        match = re.search(r'\{.*\}', response, re.DOTALL)
        if match:
            try:
                data = json.loads(match.group(0))
                if isinstance(data, dict):
                    return data
            except json.JSONDecodeError:
                pass
        return None

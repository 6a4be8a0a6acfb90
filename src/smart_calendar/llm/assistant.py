from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from openai import OpenAI

from ..config import AppSettings, LlmSettings, get_settings
from ..domain import TaskSuggestion

logger = logging.getLogger(__name__)

_SUGGESTION_SYSTEM_PROMPT = (
    "You are a helpful productivity assistant that suggests relevant tasks based on user patterns and goals. "
    "Respond with valid JSON only."
)

_SUGGESTION_PROMPT_TEMPLATE = """
Based on the following information, suggest 3-5 relevant tasks for today ({current_day}):

Recent completed tasks: {recent_tasks}
User goals: {goals}

Please suggest tasks that:
1. Build on recent activity patterns
2. Are appropriate for {current_day}
3. Support the user's goals
4. Include a mix of priorities and categories

Return a JSON array with this structure:
[
  {{
    "title": "Task title",
    "description": "Brief description",
    "category": "work|personal|health|learning|social",
    "priority": "low|medium|high",
    "estimatedDuration": 30,
    "reasoning": "Why this task is suggested"
  }}
]
"""

_SUMMARY_SYSTEM_PROMPT = (
    "You are a friendly productivity coach. Write a short, encouraging weekly review in plain text "
    "of at most four sentences."
)

MIN_SUGGESTIONS = 3
MAX_SUGGESTIONS = 5
RECENT_TASK_LIMIT = 10


class AssistantUnavailableError(RuntimeError):
    """Raised when the language model is not configured or the request fails."""


@dataclass
class ProductivityAssistant:
    """Thin wrapper around the OpenAI chat completions API."""

    settings: AppSettings = field(default_factory=get_settings)
    client: Optional[OpenAI] = None

    @property
    def llm(self) -> LlmSettings:
        return self.settings.llm

    @property
    def is_available(self) -> bool:
        return self.client is not None or self.llm.is_configured

    def _ensure_client(self) -> OpenAI:
        if self.client is not None:
            return self.client
        if not self.llm.is_configured:
            missing = ", ".join(self.llm.missing_env_vars)
            raise AssistantUnavailableError(f"OpenAI is not configured. Set: {missing or 'unknown'}.")
        self.client = OpenAI(
            api_key=self.llm.api_key,
            base_url=self.llm.base_url,
            organization=self.llm.organization,
            project=self.llm.project,
        )
        return self.client

    def _complete(self, system_prompt: str, user_prompt: str, *, temperature: float = 0.7) -> str:
        client = self._ensure_client()
        try:
            completion = client.chat.completions.create(
                model=self.llm.model,
                temperature=temperature,
                max_tokens=1000,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except Exception as exc:  # noqa: BLE001
            raise AssistantUnavailableError(f"OpenAI request failed: {exc}") from exc
        return completion.choices[0].message.content or ""

    def suggest_tasks(
        self,
        recent_tasks: Sequence[str],
        current_day: str,
        goals: Sequence[str] = (),
    ) -> List[TaskSuggestion]:
        prompt = _SUGGESTION_PROMPT_TEMPLATE.format(
            current_day=current_day,
            recent_tasks=", ".join(recent_tasks[-RECENT_TASK_LIMIT:]) or "None",
            goals=", ".join(goals) or "General productivity",
        )
        content = self._complete(_SUGGESTION_SYSTEM_PROMPT, prompt)
        return parse_suggestions(content)

    def weekly_narrative(self, stats: Dict[str, Any]) -> str:
        prompt = "Here are this week's statistics as JSON:\n" + json.dumps(stats, indent=2, default=str)
        content = self._complete(_SUMMARY_SYSTEM_PROMPT, prompt, temperature=0.5)
        return content.strip()


def _strip_code_fence(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_suggestions(content: str) -> List[TaskSuggestion]:
    """Parse the model's JSON array, dropping malformed entries."""

    try:
        payload = json.loads(_strip_code_fence(content))
    except json.JSONDecodeError as exc:
        raise AssistantUnavailableError(f"Model returned invalid JSON: {exc}") from exc
    if isinstance(payload, dict):
        payload = payload.get("suggestions") or payload.get("tasks") or []
    if not isinstance(payload, list):
        raise AssistantUnavailableError("Model response is not a list of suggestions.")

    suggestions: List[TaskSuggestion] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        try:
            suggestions.append(TaskSuggestion.from_payload(item))
        except (KeyError, TypeError, ValueError) as exc:
            logger.debug("Dropping malformed suggestion %r: %s", item, exc)
    if not suggestions:
        raise AssistantUnavailableError("Model response contained no usable suggestions.")
    return suggestions[:MAX_SUGGESTIONS]

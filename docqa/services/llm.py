import json
import re
from typing import Any, List, Dict, Optional

from litellm import acompletion

from docqa.config import Settings
from docqa.errors import UpstreamServiceError

DEFAULT_SYSTEM_PROMPT = "You are a concise, reliable assistant."

_FENCE = re.compile(r"```json|```")

class LLMService:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.model = settings.LLM_MODEL

        # Ensure correct prefix for LiteLLM
        if "gemini" in self.model.lower() and "/" not in self.model:
            self.model = f"gemini/{self.model}"

    async def get_response(self, prompt: str, system: Optional[str] = None, json_mode: bool = False) -> str:
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system or DEFAULT_SYSTEM_PROMPT},
            {"role": "user", "content": prompt}
        ]
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await acompletion(
                model=self.model,
                messages=messages,
                temperature=self.settings.LLM_TEMPERATURE,
                api_key=self.settings.LLM_API_KEY,
                **kwargs
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            raise UpstreamServiceError(f"Completion failed: {e}") from e

    async def get_json(self, prompt: str, system: Optional[str] = None) -> Any:
        """
        Ask for a JSON object. Returns the decoded value, or the cleaned raw
        text when the model did not produce valid JSON.
        """
        content = await self.get_response(prompt, system=system, json_mode=True)
        cleaned = _FENCE.sub("", content).strip()
        try:
            return json.loads(cleaned)
        except ValueError:
            return cleaned

"""OpenAI-compatible chat-completions client for the model gateway."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import time
from typing import Any, Optional

import aiohttp

from src.extraction.exceptions import UpstreamError
from src.extraction.normalizer import classify_gateway_status
from src.extraction.prompt_builder import build_messages
from src.models import GatewayConfig
from src.utils import structured_log

logger = logging.getLogger(__name__)


def extract_reply_text(data: Any) -> str:
    """Pull ``choices[0].message.content`` out of a chat-completions response."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    if not isinstance(content, str):
        raise UpstreamError("AI gateway returned no content")
    return content


class GatewayClient:
    """Posts one chat completion to the gateway and returns the reply text.

    Non-2xx statuses are classified (429 rate limited, 402 payment required,
    anything else upstream error) and raised. No retries.
    """

    def __init__(self, config: GatewayConfig, api_key: Optional[str] = None):
        self.config = config
        self._api_key = api_key

    @property
    def api_key(self) -> str:
        key = self._api_key or os.getenv(self.config.api_key_env)
        if not key:
            raise UpstreamError(f"{self.config.api_key_env} is not configured")
        return key

    @property
    def url(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/chat/completions"

    async def complete(self, prompt: str, *, model: str, system_prompt: str = "") -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {"model": model, "messages": build_messages(system_prompt, prompt)}
        started = time.monotonic()
        try:
            async with aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.request_timeout_seconds)
            ) as session:
                async with session.post(self.url, headers=headers, json=payload) as resp:
                    body = await resp.text()
                    failure = classify_gateway_status(resp.status, body)
                    if failure is not None:
                        logger.error("AI gateway error: %s %s", resp.status, body[:300])
                        structured_log.log_model_call(
                            model=model,
                            status=f"http_{resp.status}",
                            latency_ms=int((time.monotonic() - started) * 1000),
                        )
                        raise failure.to_exception()
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError as exc:
            raise UpstreamError("AI gateway request timed out") from exc
        except aiohttp.ClientError as exc:
            raise UpstreamError(f"AI gateway request failed: {exc}") from exc

        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise UpstreamError("AI gateway returned a non-JSON response") from exc
        text = extract_reply_text(data)
        latency_ms = int((time.monotonic() - started) * 1000)
        logger.info("Raw LLM response length: %d", len(text))
        structured_log.log_model_call(
            model=model, status="success", latency_ms=latency_ms, response_chars=len(text)
        )
        return text

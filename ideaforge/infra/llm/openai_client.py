"""
Client LLM basé sur l'API OpenAI.

Implémente l'interface LLM en supportant:
- chat.completions (SDK OpenAI)
- responses (SDK OpenAI plus récent), tenté si chat.completions ne renvoie aucun contenu

Aucune réponse de repli n'est inventée: sans client configuré, en cas d'erreur du SDK (timeout
compris) ou sans contenu, `LLMUnavailable` est levée et l'appelant décide (pas de retry ici).
"""

from __future__ import annotations

from typing import Any, Literal, overload

import structlog
from openai import OpenAI, OpenAIError

from ideaforge.infra.llm.base import LLM, LLMUnavailable

log = structlog.get_logger(__name__)


class OpenAILLM(LLM):
    """LLM basé sur OpenAI, avec timeout et sans retry côté SDK."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
    ) -> None:
        """Initialize the OpenAILLM client."""
        self.model = model
        if api_key:
            self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            self.client = None  # type: ignore[assignment]

    @overload
    def generate(
        self,
        messages: list[dict[str, str]],
        *,
        with_usage: Literal[True],
        **kwargs: Any,
    ) -> tuple[str, dict[str, int]]: ...

    @overload
    def generate(
        self,
        messages: list[dict[str, str]],
        *,
        with_usage: Literal[False] = False,
        **kwargs: Any,
    ) -> str: ...

    def generate(
        self,
        messages: list[dict[str, str]],
        *,
        with_usage: bool = False,
        **kwargs: Any,
    ) -> str | tuple[str, dict[str, int]]:
        """
        Génère du texte (et éventuellement les métriques d'usage).

        - with_usage=False (défaut) -> str
        - with_usage=True -> (str, dict[str, int])
        """
        if not self.client:
            raise LLMUnavailable("llm_not_configured")

        r = self._try_chat_completions(messages, **kwargs)
        if r is None:
            r = self._try_responses_api(messages, **kwargs)
        if r is None:
            raise LLMUnavailable("llm_no_content")

        text, usage = r
        return (text, usage) if with_usage else text

    # -------------------- Helpers internes --------------------

    def _try_chat_completions(
        self, messages: list[dict[str, str]], **kwargs: Any
    ) -> tuple[str, dict[str, int]] | None:
        """Tente d'utiliser l'API chat.completions."""
        try:
            resp = self.client.chat.completions.create(  # type: ignore[union-attr]
                model=self.model,
                messages=messages,
                **kwargs,
            )
        except OpenAIError as exc:
            log.warning("openai_chat_completions_failed", error=type(exc).__name__)
            raise LLMUnavailable(type(exc).__name__) from exc
        choice = resp.choices[0]
        content = getattr(getattr(choice, "message", None), "content", None)
        if not content:
            return None
        return str(content), self._extract_usage_dict(resp)

    def _try_responses_api(
        self, messages: list[dict[str, str]], **kwargs: Any
    ) -> tuple[str, dict[str, int]] | None:
        """Tente d'utiliser l'API responses."""
        try:
            resp = self.client.responses.create(  # type: ignore[union-attr]
                model=self.model,
                input=messages,
                **kwargs,
            )
        except OpenAIError as exc:
            log.warning("openai_responses_failed", error=type(exc).__name__)
            raise LLMUnavailable(type(exc).__name__) from exc
        content = getattr(resp, "output_text", None)
        if not content:
            return None
        return str(content), self._extract_usage_dict(resp)

    def _extract_usage_dict(self, resp: Any) -> dict[str, int]:
        """Extrait les infos d'usage depuis la réponse OpenAI. Toujours un dict."""
        usage = getattr(resp, "usage", None)
        if not usage:
            return {}
        return {
            "prompt_tokens": int(getattr(usage, "prompt_tokens", 0) or 0),
            "completion_tokens": int(getattr(usage, "completion_tokens", 0) or 0),
            "total_tokens": int(getattr(usage, "total_tokens", 0) or 0),
        }

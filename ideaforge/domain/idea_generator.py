"""Orchestrateur de génération d'idées à la demande.

Ce module coordonne, pour une requête utilisateur: authentification, validation du prompt,
vérification du quota, appel au backend de génération, normalisation de la réponse et
consommation du quota. Le quota n'est consommé qu'une fois l'idée validée.
"""

from __future__ import annotations

import time
from typing import Any

import structlog

from ideaforge.app.metrics import IDEA_GENERATION_LATENCY, IDEA_GENERATIONS
from ideaforge.domain.entities import IdeaRecord
from ideaforge.domain.errors import (
    GenerationUnavailable,
    IdeaError,
    InvalidArgument,
    QuotaExhausted,
    Unauthenticated,
)
from ideaforge.domain.normalizer import normalize_response
from ideaforge.domain.prompt_guard import sanitize_prompt
from ideaforge.domain.prompts import generation_messages
from ideaforge.domain.quota import QuotaLedger
from ideaforge.infra.llm.base import LLM

log = structlog.get_logger(__name__)

USER_SOURCE = "user"


class IdeaGenerator:
    """Génère une idée pour un utilisateur authentifié, sous contrôle de quota."""

    def __init__(
        self,
        llm: LLM,
        ledger: QuotaLedger,
        max_prompt_len: int = 1000,
        guard_enabled: bool = True,
    ):
        """Initialise le générateur avec son backend, son registre de quotas et sa config."""
        self.llm = llm
        self.ledger = ledger
        self.max_prompt_len = max_prompt_len
        self.guard_enabled = guard_enabled

    def generate(self, user: dict[str, Any] | None, prompt: object) -> IdeaRecord:
        """
        Produit une idée validée pour `user` à partir de `prompt`.

        Raises:
            Unauthenticated: identité absente.
            InvalidArgument: prompt absent, vide, trop long ou refusé par le garde-fou.
            QuotaExhausted: quota gratuit épuisé (avant ou au moment du commit).
            GenerationUnavailable: backend en erreur ou en timeout.
            MalformedResponse | InvalidRecord: réponse IA inexploitable.
        """
        try:
            record = self._generate(user, prompt)
        except IdeaError as err:
            IDEA_GENERATIONS.labels(outcome=err.kind).inc()
            raise
        IDEA_GENERATIONS.labels(outcome="ok").inc()
        return record

    def _generate(self, user: dict[str, Any] | None, prompt: object) -> IdeaRecord:
        if not user or not user.get("id"):
            raise Unauthenticated("missing_caller_identity")
        user_id = user["id"]
        try:
            clean = sanitize_prompt(prompt, self.max_prompt_len, self.guard_enabled)
        except ValueError as exc:
            raise InvalidArgument(str(exc)) from exc

        decision = self.ledger.check_and_reserve(user_id)
        if not decision.allowed:
            log.info("generation_denied", user_id=user_id, reason=decision.reason)
            raise QuotaExhausted("quota_exhausted")

        start = time.perf_counter()
        try:
            raw = self.llm.generate(generation_messages(clean))
        except Exception as exc:
            log.warning(
                "generation_backend_failed",
                user_id=user_id,
                error=type(exc).__name__,
                detail=str(exc),
            )
            raise GenerationUnavailable("generation_backend_failed") from exc
        finally:
            IDEA_GENERATION_LATENCY.observe(time.perf_counter() - start)

        try:
            record = normalize_response(raw, source=USER_SOURCE)
        except IdeaError as err:
            log.warning("generation_response_rejected", user_id=user_id, kind=err.kind)
            raise

        remaining = self.ledger.commit(user_id, decision.tier)
        log.info(
            "idea_generated",
            user_id=user_id,
            idea=record.name,
            tier=decision.tier.value,
            remaining=remaining,
        )
        return record

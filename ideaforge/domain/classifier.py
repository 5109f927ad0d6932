"""Classification périodique des posts du flux externe vers le catalogue public.

Chaque post est traité indépendamment: construction du prompt, appel au backend, normalisation,
upsert dans le catalogue par `name`. Un échec sur un post est journalisé et collecté dans le
rapport; il n'interrompt jamais le lot.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from ideaforge.app.metrics import CLASSIFIER_POSTS
from ideaforge.domain.entities import IdeaRecord, SourcePost
from ideaforge.domain.errors import GenerationUnavailable, IdeaError, Internal
from ideaforge.domain.normalizer import normalize_response
from ideaforge.domain.prompts import classification_messages
from ideaforge.infra.llm.base import LLM

log = structlog.get_logger(__name__)


@dataclass
class PostOutcome:
    """Issue du traitement d'un post."""

    post_id: str
    ok: bool
    name: str | None = None
    error: str | None = None


@dataclass
class ClassificationReport:
    """Bilan d'une exécution du classifieur."""

    outcomes: list[PostOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[str]:
        """Noms des idées enregistrées."""
        return [o.name for o in self.outcomes if o.ok and o.name]

    @property
    def failed(self) -> list[tuple[str, str]]:
        """Couples (post_id, kind) des posts ignorés."""
        return [(o.post_id, o.error or "internal") for o in self.outcomes if not o.ok]

    def summary(self) -> dict:
        """Résumé sérialisable (retour des tâches Celery)."""
        return {
            "attempted": len(self.outcomes),
            "succeeded": self.succeeded,
            "failed": [{"post_id": p, "kind": k} for p, k in self.failed],
        }


class BatchClassifier:
    """Classe des posts candidats et alimente le catalogue public."""

    def __init__(
        self,
        llm: LLM,
        catalog_repo,
        source_label: str = "external-feed",
        max_posts: int = 10,
    ):
        """Initialise le classifieur.

        Args:
            llm: Backend de génération.
            catalog_repo: Dépôt du catalogue public (upsert par nom).
            source_label: Origine attachée aux idées produites.
            max_posts: Nombre maximal de posts traités par exécution.
        """
        self.llm = llm
        self.catalog = catalog_repo
        self.source_label = source_label
        self.max_posts = max_posts

    def classify_post(self, post: SourcePost) -> IdeaRecord:
        """Classe un post et l'enregistre; lève une `IdeaError` en cas d'échec."""
        try:
            raw = self.llm.generate(classification_messages(post))
        except Exception as exc:
            raise GenerationUnavailable(f"{type(exc).__name__}: {exc}") from exc
        record = normalize_response(raw, source=self.source_label)
        try:
            self.catalog.upsert(record.to_public())
        except Exception as exc:
            raise Internal(f"catalog_write_failed: {type(exc).__name__}") from exc
        return record

    def _attempt(self, post: SourcePost) -> PostOutcome:
        try:
            record = self.classify_post(post)
        except IdeaError as err:
            log.warning(
                "classifier_post_skipped",
                post_id=post.id,
                kind=err.kind,
                detail=err.message,
            )
            CLASSIFIER_POSTS.labels(outcome=err.kind).inc()
            return PostOutcome(post_id=post.id, ok=False, error=err.kind)
        CLASSIFIER_POSTS.labels(outcome="ok").inc()
        log.info("classifier_post_stored", post_id=post.id, idea=record.name)
        return PostOutcome(post_id=post.id, ok=True, name=record.name)

    def run(self, posts: Iterable[SourcePost]) -> ClassificationReport:
        """Traite au plus `max_posts` posts; ne lève jamais à cause d'un post."""
        report = ClassificationReport()
        for index, post in enumerate(posts):
            if index >= self.max_posts:
                break
            report.outcomes.append(self._attempt(post))
        log.info(
            "classifier_run_done",
            attempted=len(report.outcomes),
            succeeded=len(report.succeeded),
            failed=len(report.failed),
        )
        return report

    def run_from_source(self, source) -> ClassificationReport:
        """Récupère les posts depuis `source` puis exécute `run`.

        Un échec de récupération du flux est journalisé et produit un rapport vide.
        """
        try:
            posts = list(source.fetch(self.max_posts))
        except Exception as exc:
            log.error("classifier_feed_fetch_failed", error=type(exc).__name__, detail=str(exc))
            return ClassificationReport()
        return self.run(posts)

"""Sources de posts candidats pour le classifieur.

La récupération réelle du flux (scraping, API tierce) est hors périmètre: le flux est fourni
sous forme d'une liste en mémoire ou d'un fichier JSON déposé par un collecteur externe.
"""

import json
import os
from abc import ABC, abstractmethod

import structlog
from pydantic import ValidationError

from ideaforge.domain.entities import SourcePost

log = structlog.get_logger(__name__)


class PostSource(ABC):
    """Interface d'une source de posts."""

    @abstractmethod
    def fetch(self, limit: int) -> list[SourcePost]:
        """Retourne au plus `limit` posts."""
        ...


class StaticPostSource(PostSource):
    """Source en mémoire (tests, démonstrations)."""

    def __init__(self, posts: list[SourcePost] | None = None):
        """Initialise avec une liste de posts."""
        self.posts = list(posts or [])

    def fetch(self, limit: int) -> list[SourcePost]:
        """Retourne les `limit` premiers posts."""
        return self.posts[:limit]


class JSONFilePostSource(PostSource):
    """Source basée sur un fichier JSON: liste d'objets `{id, title, body}`.

    Un fichier absent est traité comme un flux vide. Une entrée invalide est journalisée et
    ignorée sans écarter les autres.
    """

    def __init__(self, path: str):
        """Initialise la source.

        Paramètres:
        - path: chemin du fichier JSON produit par le collecteur.
        """
        self.path = path

    def fetch(self, limit: int) -> list[SourcePost]:
        """Lit le fichier et valide chaque entrée en `SourcePost`."""
        if not os.path.exists(self.path):
            return []
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError("feed_file_not_a_list")
        posts: list[SourcePost] = []
        for index, item in enumerate(data):
            if len(posts) >= limit:
                break
            try:
                posts.append(SourcePost.model_validate(item))
            except ValidationError as exc:
                log.warning(
                    "feed_entry_skipped",
                    path=self.path,
                    index=index,
                    errors=len(exc.errors()),
                )
        return posts

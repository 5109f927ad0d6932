"""
Conteneur d'injection de dépendances et configuration application.

Instancie les composants centraux (settings, dépôts, backend de génération, services métier)
et expose un singleton `container` utilisé par le reste de l'application. Chaque composant
reçoit sa configuration explicitement à la construction.
"""

from ideaforge.core.settings import Settings, get_settings
from ideaforge.domain.classifier import BatchClassifier
from ideaforge.domain.idea_generator import IdeaGenerator
from ideaforge.domain.quota import QuotaLedger
from ideaforge.domain.roles import RoleAuthority
from ideaforge.infra.feeds import JSONFilePostSource, StaticPostSource
from ideaforge.infra.identity import RepoIdentityProvider
from ideaforge.infra.llm.base import LLM
from ideaforge.infra.llm.openai_client import OpenAILLM
from ideaforge.infra.payments import StripeCheckoutProvider
from ideaforge.infra.repositories import (
    InMemoryCatalogRepo,
    InMemoryQuotaRepo,
    InMemoryUserRepo,
    RedisCatalogRepo,
    RedisQuotaRepo,
    RedisUserRepo,
)


class Container:
    def __init__(self, settings: Settings | None = None, llm: LLM | None = None):
        self.settings = settings or get_settings()
        s = self.settings
        self._build_repositories()

        self.llm = llm or OpenAILLM(
            api_key=s.OPENAI_API_KEY, model=s.LLM_MODEL, timeout=s.LLM_TIMEOUT_SECONDS
        )
        self.identity = RepoIdentityProvider(self.user_repo)
        self.payments = StripeCheckoutProvider(
            api_key=s.STRIPE_API_KEY,
            success_url=s.CHECKOUT_SUCCESS_URL,
            cancel_url=s.CHECKOUT_CANCEL_URL,
        )
        self.feed = JSONFilePostSource(s.FEED_PATH) if s.FEED_PATH else StaticPostSource()

        self.ledger = QuotaLedger(
            self.quota_repo,
            reset_value=s.QUOTA_RESET_VALUE,
            batch_size=s.QUOTA_RESET_BATCH_SIZE,
        )
        self.generator = IdeaGenerator(
            self.llm,
            self.ledger,
            max_prompt_len=s.PROMPT_MAX_LEN,
            guard_enabled=s.PROMPT_GUARD_ENABLE,
        )
        self.classifier = BatchClassifier(
            self.llm,
            self.catalog_repo,
            source_label=s.FEED_SOURCE_LABEL,
            max_posts=s.CLASSIFIER_MAX_POSTS,
        )
        self.roles = RoleAuthority(self.identity, admin_emails=s.ADMIN_EMAILS)

    def _build_repositories(self) -> None:
        if self.settings.REDIS_URL:
            try:
                self.user_repo = RedisUserRepo(self.settings.REDIS_URL)
                self.quota_repo = RedisQuotaRepo(self.settings.REDIS_URL)
                self.catalog_repo = RedisCatalogRepo(self.settings.REDIS_URL)
                self.storage_backend = "redis"
                return
            except Exception as err:
                if self.settings.REQUIRE_REDIS:
                    raise RuntimeError("Redis required but unavailable") from err
                self.storage_backend = "memory-fallback"
        else:
            if self.settings.REQUIRE_REDIS:
                raise RuntimeError("Redis required but REDIS_URL not set")
            self.storage_backend = "memory"
        self.user_repo = InMemoryUserRepo()
        self.quota_repo = InMemoryQuotaRepo()
        self.catalog_repo = InMemoryCatalogRepo()


container = Container()

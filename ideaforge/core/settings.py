"""Définition et chargement des paramètres de configuration applicative.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
"""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Détermination du fichier .env à utiliser avec priorité:
# 1) ENV_FILE (chemin explicite)
# 2) .env.{APP_ENV} si présent
# 3) .env (défaut)
_cwd = Path.cwd()
_env_file_from_env = os.getenv("ENV_FILE")
if _env_file_from_env:
    _ENV_FILE_PATH = _env_file_from_env
else:
    _app_env = os.getenv("APP_ENV", "dev")
    _candidate_specific = _cwd / f".env.{_app_env}"
    _candidate_default = _cwd / ".env"
    if _candidate_specific.exists():
        _ENV_FILE_PATH = _candidate_specific
    else:
        _ENV_FILE_PATH = _candidate_default


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "ideaforge-backend"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = False

    REDIS_URL: str | None = None
    REQUIRE_REDIS: bool = False
    # JWT/Auth
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALG: str = "HS256"
    JWT_EXPIRES_MIN: int = 60
    # Emails autorisés à accorder le rôle creator (JSON ou CSV, en plus du claim `admin`)
    ADMIN_EMAILS: list[str] | str = []

    # Backend de génération
    OPENAI_API_KEY: str | None = None
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_TIMEOUT_SECONDS: float = 30.0
    # Garde-fou des prompts utilisateur
    PROMPT_GUARD_ENABLE: bool = True
    PROMPT_MAX_LEN: int = 1000

    # Quotas
    FREE_TIER_INITIAL_GENERATIONS: int = 1
    QUOTA_RESET_VALUE: int = 1
    QUOTA_RESET_BATCH_SIZE: int = 500

    # Classification du flux externe
    FEED_PATH: str | None = None
    FEED_SOURCE_LABEL: str = "external-feed"
    CLASSIFIER_MAX_POSTS: int = 10

    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/1"

    # Paiement (hors cœur)
    STRIPE_API_KEY: str | None = None
    CHECKOUT_SUCCESS_URL: str = "http://localhost:3000/checkout/success"
    CHECKOUT_CANCEL_URL: str = "http://localhost:3000/checkout/cancel"


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()

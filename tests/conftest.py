"""Configuration de test pour pytest avec gestion des chemins.

Ce module ajoute la racine du projet au sys.path et fournit un conteneur en mémoire avec un LLM
factice, injecté dans les modules de routes pour les tests d'API.
"""

import os
import sys

import pytest

# Ensure project root is on sys.path so that
# imports like `from ideaforge...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from fastapi.testclient import TestClient  # noqa: E402

from ideaforge.core.container import Container  # noqa: E402
from ideaforge.core.settings import Settings  # noqa: E402
from tests.fakes import ScriptedLLM  # noqa: E402

ADMIN_EMAIL = "boss@test.io"

ROUTE_MODULES = [
    "ideaforge.api.routes_auth",
    "ideaforge.api.routes_ideas",
    "ideaforge.api.routes_roles",
    "ideaforge.api.routes_billing",
    "ideaforge.api.routes_catalog",
    "ideaforge.api.routes_health",
]


@pytest.fixture
def settings() -> Settings:
    """Settings isolés de l'environnement (.env ignoré, stockage mémoire)."""
    return Settings(
        _env_file=None,
        REDIS_URL=None,
        REQUIRE_REDIS=False,
        JWT_SECRET="test-secret",
        OPENAI_API_KEY=None,
        STRIPE_API_KEY=None,
        FEED_PATH=None,
        ADMIN_EMAILS=[ADMIN_EMAIL],
    )


@pytest.fixture
def fake_llm() -> ScriptedLLM:
    """LLM scripté, vide par défaut (répond une idée valide)."""
    return ScriptedLLM()


@pytest.fixture
def test_container(settings, fake_llm) -> Container:
    """Conteneur complet en mémoire."""
    return Container(settings=settings, llm=fake_llm)


@pytest.fixture
def client(test_container, monkeypatch) -> TestClient:
    """Client HTTP dont les routes utilisent `test_container`."""
    for module in ROUTE_MODULES:
        monkeypatch.setattr(f"{module}.container", test_container)
    from ideaforge.app.main import app

    return TestClient(app, raise_server_exceptions=False)

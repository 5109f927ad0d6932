"""
Entités du domaine métier.

Ce module définit les modèles de données principaux: idées normalisées, état de quota
et posts sources du flux externe.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_validator

Score = Annotated[StrictInt, Field(ge=1, le=100)]


class Category(str, Enum):
    """Catégories fermées d'une idée de jeu."""

    VIDEO_GAME = "Video Game"
    BOARD_GAME = "Board Game"
    CARD_GAME = "Card Game"
    OTHER = "Other"


# Orthographes compactes acceptées en entrée
CATEGORY_ALIASES = {
    "VideoGame": Category.VIDEO_GAME,
    "BoardGame": Category.BOARD_GAME,
    "CardGame": Category.CARD_GAME,
}


class SubscriptionTier(str, Enum):
    """Niveaux d'abonnement: seul `free` est limité en générations."""

    FREE = "free"
    PAID = "paid"


class ViabilityBreakdown(BaseModel):
    """Détail du score de viabilité."""

    model_config = ConfigDict(populate_by_name=True)

    originality: Score
    market_appeal: Score = Field(alias="marketAppeal")
    scope: Score


class IdeaRecord(BaseModel):
    """Idée de jeu normalisée et validée, clé `name` dans le catalogue public."""

    model_config = ConfigDict(populate_by_name=True)

    name: StrictStr
    description: StrictStr
    category: Category
    genre: StrictStr
    viability: Score
    viability_breakdown: ViabilityBreakdown = Field(alias="viabilityBreakdown")
    source: str = "user"

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be blank")
        return value

    @field_validator("category", mode="before")
    @classmethod
    def _category_alias(cls, value):
        if isinstance(value, str) and value in CATEGORY_ALIASES:
            return CATEGORY_ALIASES[value]
        if not isinstance(value, str | Category):
            raise ValueError("category must be a string")
        return value

    def to_public(self) -> dict:
        """Sérialise l'idée avec les noms de champs camelCase."""
        return self.model_dump(mode="json", by_alias=True)


class QuotaState(BaseModel):
    """État de quota d'un utilisateur."""

    user_id: str
    tier: SubscriptionTier = SubscriptionTier.FREE
    generations_remaining: int = Field(default=0, ge=0)


class SourcePost(BaseModel):
    """Post candidat fourni par le flux externe (titre + corps)."""

    id: str
    title: str
    body: str = ""

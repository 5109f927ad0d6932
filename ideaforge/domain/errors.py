"""
Taxonomie des erreurs métier.

Chaque erreur porte un `kind` stable, exposé tel quel aux appelants par la couche API.
Le message est destiné au journal opérationnel; la couche API le remplace par un texte générique.
"""

from __future__ import annotations


class IdeaError(Exception):
    """Erreur métier de base, identifiée par son `kind`."""

    kind = "internal"

    def __init__(self, message: str = "") -> None:
        """Initialise l'erreur avec un message de diagnostic (jamais renvoyé tel quel)."""
        super().__init__(message or self.kind)
        self.message = message or self.kind


class Unauthenticated(IdeaError):
    """Identité de l'appelant absente."""

    kind = "unauthenticated"


class PermissionDenied(IdeaError):
    """Appelant authentifié mais sans le privilège requis."""

    kind = "permission-denied"


class InvalidArgument(IdeaError):
    """Entrée manquante ou mal formée."""

    kind = "invalid-argument"


class Internal(IdeaError):
    """Échec interne (persistance, fournisseur d'identité, configuration)."""

    kind = "internal"


class QuotaExhausted(IdeaError):
    """Allocation de générations épuisée pour un utilisateur du tier gratuit."""

    kind = "QuotaExhausted"


class GenerationUnavailable(IdeaError):
    """Backend de génération indisponible, en erreur ou en timeout."""

    kind = "GenerationUnavailable"


class MalformedResponse(IdeaError):
    """Réponse IA impossible à parser en JSON."""

    kind = "MalformedResponse"


class InvalidRecord(IdeaError):
    """Réponse IA parsée mais ne respectant pas le schéma d'une idée."""

    kind = "InvalidRecord"

    def __init__(self, field: str, message: str = "") -> None:
        """Initialise l'erreur avec le chemin du champ fautif (ex: `viabilityBreakdown.scope`)."""
        super().__init__(message or f"invalid_field:{field}")
        self.field = field

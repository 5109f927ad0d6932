"""
Normalisation des réponses IA en idées validées.

Le backend de génération renvoie du texte libre censé contenir un objet JSON, parfois entouré de
marqueurs de bloc de code markdown. Ce module retire ces marqueurs, parse le JSON et valide le
schéma d'une `IdeaRecord`. Transformation pure: aucun effet de bord, résultat déterministe.
"""

from __future__ import annotations

import json
import re

from pydantic import ValidationError

from ideaforge.domain.entities import IdeaRecord
from ideaforge.domain.errors import InvalidRecord, MalformedResponse

_LEADING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*")
_TRAILING_FENCE = re.compile(r"```$")


def strip_fences(raw: str) -> str:
    """Retire les marqueurs ``` (avec langage optionnel) en tête et en fin, puis les espaces."""
    text = raw.strip()
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text.rstrip(), count=1)
    return text.strip()


def _field_path(err: ValidationError) -> str:
    first = err.errors()[0]
    loc = [str(part) for part in first.get("loc", ())]
    return ".".join(loc) or "$"


def normalize_response(raw: str, source: str = "user") -> IdeaRecord:
    """
    Extrait et valide une idée depuis une réponse IA brute.

    Args:
        raw: Texte renvoyé par le backend de génération.
        source: Origine à attacher à l'idée ("user", libellé du flux, ...).

    Returns:
        IdeaRecord: Idée validée.

    Raises:
        MalformedResponse: Si le texte n'est pas du JSON valide.
        InvalidRecord: Si le JSON ne respecte pas le schéma (champ fautif dans `field`).
    """
    if not isinstance(raw, str):
        raise MalformedResponse("response_not_text")
    try:
        data = json.loads(strip_fences(raw))
    except json.JSONDecodeError as exc:
        raise MalformedResponse(f"json_decode_error:{exc.msg}") from exc
    if not isinstance(data, dict):
        raise InvalidRecord("$", "response_not_an_object")
    # `source` est toujours fixé par le système, jamais par le modèle
    data = {k: v for k, v in data.items() if k != "source"}
    try:
        return IdeaRecord.model_validate({**data, "source": source})
    except ValidationError as exc:
        raise InvalidRecord(_field_path(exc)) from exc

"""
Garde-fou des prompts utilisateur avant envoi au backend de génération.

Contrôles: chaîne non vide après trim, longueur maximale, liste de refus de formules
d'injection de prompt courantes. Chaque violation lève `ValueError(<règle>)`.
"""

from __future__ import annotations

import re

INJECTION_PATTERNS = [
    r"ignore\s+(all\s+)?previous\s+instructions",
    r"system\s+prompt",
    r"jailbreak",
    r"do\s+anything\s+now",
    r"ignore[rz]?\s+les\s+instructions\s+pr[ée]c[ée]dentes",
]


def sanitize_prompt(prompt: object, max_len: int = 1000, enabled: bool = True) -> str:
    """
    Valide et nettoie un prompt utilisateur.

    - Refuse toute valeur non-chaîne ou vide après trim (`empty_prompt`).
    - Si `enabled` est faux, seul le trim est appliqué.
    - Sinon applique `prompt_too_long` et `prompt_injection_detected`.

    Returns:
        str: Le prompt nettoyé.

    Raises:
        ValueError: en cas de violation (message = nom de la règle).
    """
    if not isinstance(prompt, str):
        raise ValueError("prompt_not_a_string")
    cleaned = prompt.strip()
    if not cleaned:
        raise ValueError("empty_prompt")
    if not enabled:
        return cleaned
    if len(cleaned) > max_len:
        raise ValueError("prompt_too_long")
    for pat in INJECTION_PATTERNS:
        if re.search(pat, cleaned, flags=re.IGNORECASE):
            raise ValueError("prompt_injection_detected")
    return cleaned

"""Prompts envoyés au backend de génération (génération interactive et classification)."""

from __future__ import annotations

from ideaforge.domain.entities import Category, SourcePost

_CATEGORIES = ", ".join(f'"{c.value}"' for c in Category)

OUTPUT_CONTRACT = (
    "Respond with a single JSON object and nothing else, with exactly these fields:\n"
    '- "name": a short, unique title for the game (non-empty string)\n'
    '- "description": two or three sentences describing the game (string)\n'
    f'- "category": one of {_CATEGORIES}\n'
    '- "genre": the genre, e.g. "Simulation", "Puzzle", "Deck-builder" (string)\n'
    '- "viability": overall viability score, integer from 1 to 100\n'
    '- "viabilityBreakdown": an object with "originality", "marketAppeal" and "scope", '
    "each an integer from 1 to 100\n"
)

GENERATION_SYSTEM = (
    "You are a game designer who pitches original, feasible game ideas. " + OUTPUT_CONTRACT
)

CLASSIFICATION_SYSTEM = (
    "You read posts where people describe game ideas and turn each post into one structured, "
    "honestly scored game idea. " + OUTPUT_CONTRACT
)


def generation_messages(prompt: str) -> list[dict[str, str]]:
    """Messages pour une demande de génération utilisateur."""
    return [
        {"role": "system", "content": GENERATION_SYSTEM},
        {"role": "user", "content": f"Generate a game idea based on: {prompt}"},
    ]


def classification_messages(post: SourcePost) -> list[dict[str, str]]:
    """Messages pour la classification d'un post du flux externe."""
    return [
        {"role": "system", "content": CLASSIFICATION_SYSTEM},
        {
            "role": "user",
            "content": f"Post title: {post.title}\nPost body:\n{post.body or '(empty)'}",
        },
    ]

"""
Fournisseur de paiement (création de sessions de checkout Stripe).

Collaborateur hors cœur: seule la création de session est couverte, sans webhooks.
"""

from __future__ import annotations

import stripe


class PaymentUnavailable(Exception):
    """Le fournisseur de paiement n'est pas configuré ou a échoué."""


class StripeCheckoutProvider:
    """Crée des sessions Stripe Checkout en mode abonnement."""

    def __init__(self, api_key: str | None, success_url: str, cancel_url: str):
        """Initialise avec la clé API et les URLs de redirection."""
        self.api_key = api_key
        self.success_url = success_url
        self.cancel_url = cancel_url

    def create_checkout_session(self, price_id: str, user_id: str) -> str:
        """Crée une session pour `price_id` rattachée à `user_id`; retourne son identifiant."""
        if not self.api_key:
            raise PaymentUnavailable("stripe_not_configured")
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                mode="subscription",
                line_items=[{"price": price_id, "quantity": 1}],
                success_url=self.success_url,
                cancel_url=self.cancel_url,
                client_reference_id=user_id,
                metadata={"user_id": user_id},
            )
        except stripe.StripeError as exc:
            raise PaymentUnavailable(type(exc).__name__) from exc
        return session.id

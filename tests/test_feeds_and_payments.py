"""Tests pour les sources de posts et le fournisseur de paiement."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe

from ideaforge.infra.feeds import JSONFilePostSource, StaticPostSource
from ideaforge.infra.payments import PaymentUnavailable, StripeCheckoutProvider

SUCCESS_URL = "https://app.test/ok"
CANCEL_URL = "https://app.test/cancel"


def test_json_file_source_reads_and_limits(tmp_path) -> None:
    """Le fichier est lu, validé et tronqué à `limit`."""
    path = tmp_path / "feed.json"
    posts = [{"id": f"p{i}", "title": f"T{i}", "body": "b"} for i in range(5)]
    path.write_text(json.dumps(posts), encoding="utf-8")
    fetched = JSONFilePostSource(str(path)).fetch(2)
    assert [p.id for p in fetched] == ["p0", "p1"]


def test_json_file_source_missing_file_is_empty(tmp_path) -> None:
    """Un fichier absent est un flux vide."""
    assert JSONFilePostSource(str(tmp_path / "nope.json")).fetch(10) == []


def test_json_file_source_rejects_non_list(tmp_path) -> None:
    """Un fichier qui n'est pas une liste est refusé."""
    path = tmp_path / "feed.json"
    path.write_text('{"id": "p1"}', encoding="utf-8")
    with pytest.raises(ValueError):
        JSONFilePostSource(str(path)).fetch(10)


def test_static_source_limit() -> None:
    """La source statique respecte la limite."""
    assert StaticPostSource().fetch(3) == []


def test_checkout_requires_api_key() -> None:
    """Sans clé Stripe, la création échoue proprement."""
    provider = StripeCheckoutProvider(None, SUCCESS_URL, CANCEL_URL)
    with pytest.raises(PaymentUnavailable):
        provider.create_checkout_session("price_1", "u1")


@patch("ideaforge.infra.payments.stripe.checkout.Session.create")
def test_checkout_creates_subscription_session(mock_create) -> None:
    """La session est créée en mode abonnement et rattachée à l'utilisateur."""
    mock_create.return_value = SimpleNamespace(id="cs_test_123")
    provider = StripeCheckoutProvider("sk_test", SUCCESS_URL, CANCEL_URL)
    assert provider.create_checkout_session("price_1", "u1") == "cs_test_123"
    kwargs = mock_create.call_args.kwargs
    assert kwargs["mode"] == "subscription"
    assert kwargs["line_items"] == [{"price": "price_1", "quantity": 1}]
    assert kwargs["client_reference_id"] == "u1"
    assert kwargs["success_url"] == SUCCESS_URL


@patch("ideaforge.infra.payments.stripe.checkout.Session.create")
def test_checkout_stripe_error(mock_create) -> None:
    """Une erreur Stripe devient PaymentUnavailable."""
    mock_create.side_effect = stripe.StripeError("declined")
    provider = StripeCheckoutProvider("sk_test", SUCCESS_URL, CANCEL_URL)
    with pytest.raises(PaymentUnavailable):
        provider.create_checkout_session("price_1", "u1")


def test_json_file_source_skips_invalid_entries(tmp_path) -> None:
    """Une entrée invalide est ignorée, les entrées valides sont conservées."""
    path = tmp_path / "feed.json"
    entries = [
        {"id": 1, "title": "t1"},
        {"id": "p2"},
        {"id": "p3", "title": "t3", "body": "b"},
        {"id": "p4", "title": "t4"},
    ]
    path.write_text(json.dumps(entries), encoding="utf-8")
    assert [p.id for p in JSONFilePostSource(str(path)).fetch(10)] == ["p3", "p4"]
    assert [p.id for p in JSONFilePostSource(str(path)).fetch(1)] == ["p3"]

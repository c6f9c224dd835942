"""
Parcours complet: ajout au panier, démarrage du paiement, redirection vers le
processeur, retour sur le storefront (nouveau chargement) et réconciliation.
"""
import pytest
from fastapi.testclient import TestClient

from storefront.config import PENDING_SESSION_KEY, PENDING_TIMESTAMP_KEY
from storefront.payments import RedirectNavigator, ReconciliationState
from storefront.payments.pending import now_ms
from storefront.shell import StorefrontShell


@pytest.mark.asyncio
async def test_paid_checkout_roundtrip(http_client, storage, commerce_api):
    # Premier chargement: ajout puis checkout (horloge réelle)
    navigator = RedirectNavigator()
    shell = StorefrontShell(http_client, storage, navigator)
    assert (await shell.on_application_start()).reconciliation is ReconciliationState.IDLE

    assert await shell.add_to_cart(101, 2) == 2
    panel = await shell.open_cart()
    assert panel.total_items_label == "Total articles : 2"
    assert panel.total_amount_label == "79.98 RON"
    assert panel.checkout_label == "Finaliser la commande – 99.97 RON"

    before = now_ms()
    await shell.checkout()
    assert navigator.location == commerce_api.session_url
    assert storage.get(PENDING_SESSION_KEY) == commerce_api.session_id
    assert abs(int(storage.get(PENDING_TIMESTAMP_KEY)) - before) < 1000

    # Le processeur confirme le paiement; retour sur le storefront = nouveau chargement
    commerce_api.payment_statuses[commerce_api.session_id] = "paid"
    returned = StorefrontShell(http_client, storage, RedirectNavigator())
    result = await returned.on_application_start()

    assert result.reconciliation is ReconciliationState.SETTLED
    assert result.badge_count == 0
    assert commerce_api.count("POST", "/api/clear-cart") == 1
    assert storage.get(PENDING_SESSION_KEY) is None
    assert storage.get(PENDING_TIMESTAMP_KEY) is None

    # Chargement suivant: plus rien à réconcilier
    again = StorefrontShell(http_client, storage, RedirectNavigator())
    assert (await again.on_application_start()).reconciliation is ReconciliationState.IDLE
    assert commerce_api.count("POST", "/api/clear-cart") == 1


@pytest.mark.asyncio
async def test_abandoned_checkout_expires(http_client, storage, commerce_api, clock):
    shell = StorefrontShell(http_client, storage, RedirectNavigator(), clock=clock)
    await shell.add_to_cart(102)
    await shell.checkout()

    # Retour après la fenêtre de 5 minutes, paiement jamais confirmé
    clock.advance(300000)
    returned = StorefrontShell(http_client, storage, RedirectNavigator(), clock=clock)
    result = await returned.on_application_start()

    assert result.reconciliation is ReconciliationState.EXPIRED
    assert result.badge_count == 1
    assert commerce_api.calls_to("/api/check-payment-status") == []
    assert commerce_api.count("POST", "/api/clear-cart") == 0
    assert storage.get(PENDING_SESSION_KEY) is None


@pytest.mark.asyncio
async def test_unpaid_return_keeps_record_until_paid(http_client, storage, commerce_api, clock):
    shell = StorefrontShell(http_client, storage, RedirectNavigator(), clock=clock)
    await shell.add_to_cart(101)
    await shell.checkout()

    clock.advance(60000)
    first_return = StorefrontShell(http_client, storage, RedirectNavigator(), clock=clock)
    assert (await first_return.on_application_start()).reconciliation is ReconciliationState.NOT_PAID
    assert storage.get(PENDING_SESSION_KEY) == commerce_api.session_id

    # Paiement confirmé plus tard, toujours dans la fenêtre
    commerce_api.payment_statuses[commerce_api.session_id] = "paid"
    clock.advance(60000)
    second_return = StorefrontShell(http_client, storage, RedirectNavigator(), clock=clock)
    result = await second_return.on_application_start()
    assert result.reconciliation is ReconciliationState.SETTLED
    assert result.badge_count == 0


def test_web_roundtrip(app, commerce_api):
    with TestClient(app) as browser:
        assert browser.post("/api/storefront/start").json() == {"reconciliation": "idle", "badgeCount": 0}
        assert browser.post("/api/storefront/cart", json={"productId": 101, "quantity": 2}).json() == {"badgeCount": 2}

        r = browser.post("/api/storefront/checkout", follow_redirects=False)
        assert r.status_code == 303
        assert r.headers["location"] == commerce_api.session_url

        commerce_api.payment_statuses[commerce_api.session_id] = "paid"
        assert browser.post("/api/storefront/start").json() == {"reconciliation": "settled", "badgeCount": 0}
        assert commerce_api.count("POST", "/api/clear-cart") == 1

        panel = browser.get("/api/storefront/cart").json()
        assert panel["empty"] is True
        assert panel["message"] == "Votre panier est vide"

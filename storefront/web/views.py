import logging
from typing import Union

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field
from starlette.status import HTTP_303_SEE_OTHER, HTTP_502_BAD_GATEWAY

from storefront.errors import ApiError, CartActionError, CheckoutError
from storefront.shell import CATALOG_ERROR, CHECKOUT_ERROR, StorefrontShell
from storefront.utils.rate_limit import optional_rate_limit
from .dependencies import get_shell

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/storefront", tags=["Storefront"])


class AddToCartRequest(BaseModel):
    productId: Union[int, str]
    quantity: int = Field(default=1, ge=1)


# module storefront.web.views
@router.post("/start")
async def application_start(shell: StorefrontShell = Depends(get_shell)):
    """
    Montage de la page: réconciliation du paiement en attente + badge panier.
    - Jamais bloquant: l'état de réconciliation est renvoyé à titre informatif.
    """
    result = await shell.on_application_start()
    return result.to_dict()


@router.get("/products")
async def list_products(shell: StorefrontShell = Depends(get_shell)):
    """
    Catalogue brut (filtre/tri hors périmètre).
    - Erreur: 502 avec message affichable (échec terminal pour la vue).
    """
    try:
        products = await shell.list_products()
    except ApiError:
        logger.exception("Erreur list_products")
        raise HTTPException(status_code=HTTP_502_BAD_GATEWAY, detail=CATALOG_ERROR)
    return {"products": [p.model_dump(mode="json", by_alias=False) for p in products]}


@router.get("/cart")
async def open_cart(shell: StorefrontShell = Depends(get_shell)):
    """Panneau panier; en cas d'échec, panneau vide avec message d'erreur (200)."""
    panel = await shell.open_cart()
    return {**panel.to_dict(), "badgeCount": shell.badge_count()}


@router.post("/cart")
async def add_to_cart(payload: AddToCartRequest, shell: StorefrontShell = Depends(get_shell)):
    """
    Ajoute un produit (quantité >= 1, 422 sinon).
    - Erreur: 502 + message utilisateur (l'action n'a eu aucun effet).
    """
    try:
        badge = await shell.add_to_cart(payload.productId, payload.quantity)
    except CartActionError as e:
        raise HTTPException(status_code=HTTP_502_BAD_GATEWAY, detail=e.notice)
    return {"badgeCount": badge}


@router.delete("/cart/{product_id}")
async def remove_from_cart(product_id: str, shell: StorefrontShell = Depends(get_shell)):
    try:
        panel = await shell.remove_from_cart(product_id)
    except CartActionError as e:
        raise HTTPException(status_code=HTTP_502_BAD_GATEWAY, detail=e.notice)
    return {**panel.to_dict(), "badgeCount": shell.badge_count()}


@router.post("/cart/close")
async def close_cart(shell: StorefrontShell = Depends(get_shell)):
    return {"badgeCount": await shell.close_cart()}


@router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def checkout(shell: StorefrontShell = Depends(get_shell)):
    """
    Démarre le paiement et redirige (303) vers la page du processeur.
    Étapes:
      1) Relit le panier pour le total affiché (panier + frais), journalisé uniquement
      2) Demande la session au serveur, enregistre le checkout en attente
      3) Redirige vers sessionUrl
    - Erreur: 502, aucune redirection, aucun checkout enregistré.
    """
    panel = await shell.open_cart()
    expected_total = None if panel.error else panel.display_total
    try:
        await shell.checkout(expected_total)
    except CheckoutError:
        raise HTTPException(status_code=HTTP_502_BAD_GATEWAY, detail=CHECKOUT_ERROR)
    return RedirectResponse(url=shell.navigator.location, status_code=HTTP_303_SEE_OTHER)


@router.delete("/checkout/pending")
async def cancel_pending_checkout(shell: StorefrontShell = Depends(get_shell)):
    """Annulation explicite du checkout en attente (aucune vérification de paiement ensuite)."""
    return {"cancelled": shell.cancel_pending_checkout()}

from urllib.parse import urlparse
import socket

import httpx

from storefront.catalog import CatalogClient
from storefront.errors import ApiError


async def health_commerce_info(http: httpx.AsyncClient) -> dict:
    """
    Diagnostic de l'API commerce: résolution DNS puis lecture du catalogue.
    Ne lève jamais: les erreurs sont rapportées dans le dict.
    """
    effective_url = str(http.base_url)
    parsed = urlparse(effective_url) if effective_url else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, parsed.port or 443)
            dns_ok = True
        except OSError as e:
            dns_ok = False
            dns_error = str(e)

    info = {
        "api_url": effective_url,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "products": None,
        "error": None,
    }
    try:
        products = await CatalogClient(http).fetch_products()
        info["products"] = len(products)
        info["connect_ok"] = True
    except ApiError as e:
        info["error"] = e.message
    return info

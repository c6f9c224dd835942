# storefront.config
from decimal import Decimal
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du storefront.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Expose l'URL de l'API commerce et le timeout HTTP
- Paramètres d'affichage du panier (devise, frais fixes ajoutés au total affiché)
- Stockage durable côté client (mémoire ou Redis) et fenêtre de validité du checkout
- Sécurité web de l'hôte FastAPI (session, cookies, CORS/hosts)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _timeout_from_env(v: str):
    """Timeout en secondes; vide => pas de timeout (une requête bloquée ne se résout jamais)."""
    v = _clean_env(v)
    return float(v) if v else None

# API commerce (service HTTP+JSON consommé)
# - sans schéma: on préfixe en http:// ; slash final retiré
API_URL = _clean_env(os.getenv("STOREFRONT_API_URL") or "http://localhost:5000")
if API_URL and not API_URL.startswith("http"):
    API_URL = "http://" + API_URL
API_URL = API_URL.rstrip("/")
API_TIMEOUT = _timeout_from_env(os.getenv("STOREFRONT_API_TIMEOUT", ""))

# Affichage panier
CURRENCY = _clean_env(os.getenv("STOREFRONT_CURRENCY") or "RON")
# Frais fixes (livraison/service) ajoutés au total affiché uniquement, jamais envoyés au serveur
CHECKOUT_SURCHARGE = Decimal(_clean_env(os.getenv("CHECKOUT_SURCHARGE") or "19.99"))

# Checkout en attente: fenêtre de validité fixe (5 minutes)
PENDING_CHECKOUT_TTL_MS = 300000
PENDING_SESSION_KEY = "lastCheckoutSession"
PENDING_TIMESTAMP_KEY = "checkoutTimestamp"
# Dernier badge confirmé par le serveur (repli quand la relecture du panier échoue)
BADGE_COUNT_KEY = "cartBadgeCount"

# Stockage durable côté client: "memory" (dev/tests) ou "redis"
STORAGE_BACKEND = _clean_env(os.getenv("STOREFRONT_STORAGE") or "memory").lower()
STORAGE_REDIS_URL = _clean_env(os.getenv("STOREFRONT_REDIS_URL") or "redis://127.0.0.1:6379/0")
STORAGE_KEY_PREFIX = "storefront"

# Cookies / sécurité
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "replace_me_with_a_long_random_secret")
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

# Rate limiting checkout: Redis (fastapi-limiter) si une URL est fournie, sinon fenêtre locale en mémoire
# - par défaut, réutilise Redis du stockage durable quand STOREFRONT_STORAGE=redis
RATE_LIMIT_REDIS_URL = _clean_env(
    os.getenv("RATE_LIMIT_REDIS_URL") or (STORAGE_REDIS_URL if STORAGE_BACKEND == "redis" else "")
)

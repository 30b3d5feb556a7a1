# agenda_studio/core/config.py
import logging
import os
from dotenv import load_dotenv

# Carrega variáveis de ambiente do ficheiro .env (localmente)
load_dotenv()


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logging.warning(f"Valor inválido para {name}: '{raw}'. Usando padrão {default}.")
        return default
    if value <= 0:
        logging.warning(f"{name} deve ser positivo (recebido {value}). Usando padrão {default}.")
        return default
    return value


# --- Fuso e Grade ---
LOCAL_TIMEZONE = os.environ.get("LOCAL_TIMEZONE", "America/Sao_Paulo")

GRID_POLICIES = ("full_day", "bounded")
SLOT_GRID_POLICY = os.environ.get("SLOT_GRID_POLICY", "full_day").strip().lower()
if SLOT_GRID_POLICY not in GRID_POLICIES:
    logging.warning(f"SLOT_GRID_POLICY '{SLOT_GRID_POLICY}' desconhecida. Usando 'full_day'.")
    SLOT_GRID_POLICY = "full_day"

DEFAULT_SLOT_INTERVAL = _int_from_env("DEFAULT_SLOT_INTERVAL", 30)
DEFAULT_SERVICE_DURATION = _int_from_env("DEFAULT_SERVICE_DURATION", 30)

# --- Firestore ---
TENANT_COLLECTION = os.environ.get("TENANT_COLLECTION", "estudios")
BOOKINGS_COLLECTION = "agendamentos"
SERVICES_COLLECTION = "servicos"
PRODUCTS_COLLECTION = "produtos"
CREDENTIALS_PATH = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", "credentials.json")

# --- API ---
_DEFAULT_ORIGINS = "http://localhost:3000,http://localhost:5173"
CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", _DEFAULT_ORIGINS).split(",") if o.strip()]

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# agenda_studio/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agenda_studio import __version__
from agenda_studio.core import config
from agenda_studio.routers import booking_routes, public_routes, schedule_routes

# Configuração do logging
logging.basicConfig(level=config.LOG_LEVEL)

# Cria a instância principal do FastAPI
app = FastAPI(
    title="API Agenda Studio",
    description="Motor de agendamento e resolução de conflitos para estúdios",
    version=__version__,
)

# --- CONFIGURAÇÃO DO CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- INCLUSÃO DOS ROTEADORES ---
# 1. Rotas Públicas (Agendamento do Cliente Final)
app.include_router(public_routes.router, prefix="/api/v1")

# 2. Rotas Protegidas do Admin (Agenda e Agendamentos do Estúdio)
app.include_router(schedule_routes.router, prefix="/api/v1")
app.include_router(booking_routes.router, prefix="/api/v1")


# --- Rota Raiz Principal ---
@app.get("/", tags=["Root"])
def read_root():
    """Endpoint raiz para verificar o estado da API."""
    return {"status": "API Agenda Studio está online e operacional!"}

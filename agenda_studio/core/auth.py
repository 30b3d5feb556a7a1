# agenda_studio/core/auth.py
import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from firebase_admin import auth
from google.cloud.firestore import FieldFilter

from agenda_studio.core import config
from agenda_studio.core import db as core_db

# Define o esquema de autenticação (token Firebase ID no header Bearer).
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


async def get_current_user(request: Request, token: str = Depends(oauth2_scheme)):
    """Dependência FastAPI que verifica o token Firebase ID."""

    # Preflight do CORS não carrega token
    if request.method == "OPTIONS":
        logging.debug("OPTIONS request received, bypassing token validation.")
        return None

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials / Token missing or invalid",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if token is None:
        logging.warning("Authentication token not provided for non-OPTIONS request.")
        raise credentials_exception

    try:
        return auth.verify_id_token(token)
    except auth.ExpiredIdTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expirado")
    except auth.InvalidIdTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token inválido")
    except Exception as e:
        logging.error(f"Unexpected error during token verification: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erro interno de autenticação")


async def get_current_studio_id(current_user: dict = Depends(get_current_user)) -> str:
    """Resolve o estúdio (tenant) cujo `ownerUID` é o usuário autenticado."""
    if core_db.db is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Banco de dados indisponível.")

    user_uid = current_user.get("uid")
    try:
        query = core_db.db.collection(config.TENANT_COLLECTION)\
            .where(filter=FieldFilter("ownerUID", "==", user_uid)).limit(1)
        docs = list(query.stream())
    except Exception as e:
        logging.error(f"Erro ao buscar estúdio do usuário {user_uid}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erro interno.")

    if not docs:
        logging.warning(f"Usuário autenticado (UID: {user_uid}) mas sem documento de estúdio.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Nenhum estúdio encontrado para esta conta.",
        )
    return docs[0].id

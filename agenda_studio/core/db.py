# agenda_studio/core/db.py
import logging
import os

import firebase_admin
from firebase_admin import credentials, firestore

from agenda_studio.core import config


def init_firestore():
    """Inicializa o Firebase Admin SDK e devolve o cliente Firestore (ou None)."""
    try:
        if not firebase_admin._apps:
            cred_path = config.CREDENTIALS_PATH
            if not os.path.exists(cred_path):
                logging.warning(f"Credencial não encontrada em '{cred_path}'. Firestore indisponível.")
                return None
            cred = credentials.Certificate(cred_path)
            firebase_admin.initialize_app(cred)
            logging.info(f"Firebase Admin SDK inicializado com: {cred_path}")
        return firestore.client()
    except Exception as e:
        logging.error(f"Falha CRÍTICA ao inicializar Firebase: {e}")
        return None


db = init_firestore()


def tenant_ref(client, tenant_id: str):
    """Documento do estúdio (tenant) no Firestore."""
    return client.collection(config.TENANT_COLLECTION).document(tenant_id)

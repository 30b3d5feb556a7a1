# agenda_studio/services/inventory_service.py
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List

import pytz
from pydantic import BaseModel

from agenda_studio.core import config
from agenda_studio.core.db import tenant_ref
from agenda_studio.core.errors import SideEffectFailure
from agenda_studio.core.models import ConsumptionResult, Service
from agenda_studio.services.service_catalog import ServiceCatalog

MOVEMENTS_COLLECTION = "movimentacoes"


class StockMovement(BaseModel):
    product_id: str
    product_name: str
    previous_quantity: float
    new_quantity: float
    quantity_change: float
    notes: str


class ConsumptionPlan(BaseModel):
    movements: List[StockMovement] = []
    warnings: List[str] = []


class InventoryConsumer(ABC):
    @abstractmethod
    async def consume_for_service(self, tenant_id: str, service_id: str) -> ConsumptionResult:
        """
        Dá baixa nos produtos vinculados ao serviço.

        Serviço sem produtos vinculados não é erro: resultado informativo.
        Raises: SideEffectFailure quando o estoque não pode ser lido/gravado.
        """


def plan_consumption(service: Service, products: Dict[str, Dict[str, Any]]) -> ConsumptionPlan:
    """
    Calcula a baixa de estoque de um serviço concluído (sem gravar nada).

    `products` é {id: dados do produto}. Quantidade nunca fica negativa;
    falta de estoque vira aviso, não bloqueio. Com `useSecondaryUnit` a
    quantidade da receita é convertida pelo `fator_conversao` do produto.
    """
    plan = ConsumptionPlan()
    current = {pid: float(p.get("quantidade_atual", 0) or 0) for pid, p in products.items()}

    for item in service.products:
        product = products.get(item.productId)
        if product is None:
            plan.warnings.append(f"Produto {item.productId} não encontrado no estoque")
            continue

        name = product.get("nome", item.productId)
        unit = product.get("unidade", "un")
        to_subtract = item.quantity
        factor = product.get("fator_conversao") or product.get("conversionFactor") or 0
        if item.useSecondaryUnit and factor > 0:
            to_subtract = item.quantity / factor

        previous = current[item.productId]
        if previous < to_subtract:
            plan.warnings.append(
                f"Estoque insuficiente para {name}: necessário {to_subtract:g}{unit}, disponível {previous:g}{unit}"
            )
        new_quantity = max(0.0, previous - to_subtract)
        current[item.productId] = new_quantity
        plan.movements.append(StockMovement(
            product_id=item.productId,
            product_name=name,
            previous_quantity=previous,
            new_quantity=new_quantity,
            quantity_change=new_quantity - previous,
            notes=f"Baixa automática via serviço: {service.name}",
        ))
    return plan


def plan_message(plan: ConsumptionPlan) -> str:
    if plan.warnings:
        return "Estoque atualizado, mas houve alertas:\n" + "\n".join(plan.warnings)
    return "Estoque atualizado com sucesso"


class FirestoreInventoryService(InventoryConsumer):
    """Baixa em estudios/{tenant}/produtos, com histórico em produtos/{id}/movimentacoes."""

    def __init__(self, client, catalog: ServiceCatalog):
        self.client = client
        self.catalog = catalog

    async def consume_for_service(self, tenant_id: str, service_id: str) -> ConsumptionResult:
        if self.client is None:
            raise SideEffectFailure("Banco de dados indisponível para baixa de estoque.")

        # Registros antigos podem guardar serviços compostos como "id1,id2"
        service_ids = [sid for sid in service_id.split(",") if sid]
        try:
            services = await self.catalog.get_many(tenant_id, service_ids)
        except Exception as e:
            raise SideEffectFailure(f"Não foi possível carregar o serviço {service_id}: {e}") from e

        services = [s for s in services if s.products]
        if not services:
            logging.info(f"[Estoque] Serviço {service_id} sem produtos vinculados. Nada a baixar.")
            return ConsumptionResult(success=True, message="Nenhum produto vinculado ao serviço; estoque não alterado.")

        try:
            products_ref = tenant_ref(self.client, tenant_id).collection(config.PRODUCTS_COLLECTION)
            products = {doc.id: doc.to_dict() for doc in products_ref.stream()}

            warnings = []
            for service in services:
                plan = plan_consumption(service, products)
                warnings.extend(plan.warnings)
                for movement in plan.movements:
                    ref = products_ref.document(movement.product_id)
                    ref.update({"quantidade_atual": movement.new_quantity})
                    ref.collection(MOVEMENTS_COLLECTION).document().set({
                        "tipo": "servico",
                        "quantidade": movement.quantity_change,
                        "quantidade_anterior": movement.previous_quantity,
                        "quantidade_nova": movement.new_quantity,
                        "observacao": movement.notes,
                        "data": datetime.now(pytz.utc),
                    })
                    products[movement.product_id]["quantidade_atual"] = movement.new_quantity
                    logging.info(
                        f"[Estoque] {movement.product_name}: {movement.previous_quantity:g} -> {movement.new_quantity:g}"
                    )
        except Exception as e:
            logging.exception(f"[Estoque] Falha na baixa de estoque do serviço {service_id}:")
            raise SideEffectFailure(f"Falha ao atualizar estoque: {e}") from e

        return ConsumptionResult(success=True, message=plan_message(ConsumptionPlan(warnings=warnings)))

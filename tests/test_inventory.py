"""
Tests for services/inventory_service.py
"""

import unittest
from unittest.mock import MagicMock

from agenda_studio.core.errors import SideEffectFailure
from agenda_studio.core.models import ServiceProduct
from agenda_studio.services.inventory_service import FirestoreInventoryService, plan_consumption, plan_message
from tests.fakes import FakeCatalog, make_service

TINTA = {"nome": "Tinta", "unidade": "un", "quantidade_atual": 3, "fator_conversao": 500}
SHAMPOO = {"nome": "Shampoo", "unidade": "ml", "quantidade_atual": 100}


def coloracao(**overrides):
    products = overrides.pop("products", [
        ServiceProduct(productId="tinta", quantity=250, useSecondaryUnit=True),
        ServiceProduct(productId="shampoo", quantity=30),
    ])
    return make_service("s-color", "Coloração", 120, 150.0, products=products, **overrides)


def product_doc(doc_id, data):
    doc = MagicMock()
    doc.id = doc_id
    doc.to_dict.return_value = dict(data)
    return doc


class TestPlanConsumption(unittest.TestCase):

    def test_secondary_unit_uses_conversion_factor(self):
        plan = plan_consumption(coloracao(), {"tinta": TINTA, "shampoo": SHAMPOO})
        tinta, shampoo = plan.movements
        self.assertEqual(tinta.new_quantity, 2.5)
        self.assertEqual(shampoo.new_quantity, 70)
        self.assertEqual(plan.warnings, [])
        self.assertEqual(plan_message(plan), "Estoque atualizado com sucesso")

    def test_stock_never_goes_negative(self):
        service = coloracao(products=[ServiceProduct(productId="shampoo", quantity=150)])
        plan = plan_consumption(service, {"shampoo": SHAMPOO})
        self.assertEqual(plan.movements[0].new_quantity, 0)
        self.assertEqual(plan.movements[0].quantity_change, -100)
        self.assertEqual(len(plan.warnings), 1)
        self.assertIn("Estoque insuficiente para Shampoo", plan.warnings[0])
        self.assertIn("alertas", plan_message(plan))

    def test_missing_product_is_a_warning(self):
        plan = plan_consumption(coloracao(), {"shampoo": SHAMPOO})
        self.assertEqual(len(plan.movements), 1)
        self.assertIn("tinta", plan.warnings[0])


class TestFirestoreInventoryService(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.client = MagicMock()
        self.products_ref = self.client.collection.return_value.document.return_value.collection.return_value
        self.products_ref.stream.return_value = [product_doc("tinta", TINTA), product_doc("shampoo", SHAMPOO)]

    async def test_updates_quantities_and_logs_movements(self):
        service = FirestoreInventoryService(self.client, FakeCatalog([coloracao()]))
        result = await service.consume_for_service("t1", "s-color")

        self.assertTrue(result.success)
        updates = [c.args[0] for c in self.products_ref.document.return_value.update.call_args_list]
        self.assertEqual(updates, [{"quantidade_atual": 2.5}, {"quantidade_atual": 70}])
        movement_set = self.products_ref.document.return_value.collection.return_value.document.return_value.set
        self.assertEqual(movement_set.call_count, 2)
        self.assertEqual(movement_set.call_args_list[0].args[0]["tipo"], "servico")

    async def test_service_without_recipe(self):
        service = FirestoreInventoryService(self.client, FakeCatalog([make_service("s1")]))
        result = await service.consume_for_service("t1", "s1")
        self.assertTrue(result.success)
        self.assertIn("Nenhum produto", result.message)
        self.products_ref.document.return_value.update.assert_not_called()

    async def test_composite_id_consumes_each_component(self):
        catalog = FakeCatalog([coloracao(), make_service("s1")])
        service = FirestoreInventoryService(self.client, catalog)
        result = await service.consume_for_service("t1", "s1,s-color")
        self.assertTrue(result.success)
        self.assertEqual(self.products_ref.document.return_value.update.call_count, 2)

    async def test_store_failure_raises_side_effect_failure(self):
        self.products_ref.stream.side_effect = RuntimeError("deadline exceeded")
        service = FirestoreInventoryService(self.client, FakeCatalog([coloracao()]))
        with self.assertRaises(SideEffectFailure):
            await service.consume_for_service("t1", "s-color")

    async def test_no_client(self):
        service = FirestoreInventoryService(None, FakeCatalog([coloracao()]))
        with self.assertRaises(SideEffectFailure):
            await service.consume_for_service("t1", "s-color")


if __name__ == "__main__":
    unittest.main()

# agenda_studio/core/dependencies.py
# Colaboradores injetados nas rotas. Os testes trocam estes provedores via
# app.dependency_overrides.
from fastapi import Depends

from agenda_studio.core import db as core_db
from agenda_studio.core.events import ChangeNotifier
from agenda_studio.scheduling.lifecycle import BookingLifecycle
from agenda_studio.scheduling.occupancy import OccupancyResolver
from agenda_studio.services.booking_store import BookingStore, FirestoreBookingStore
from agenda_studio.services.inventory_service import FirestoreInventoryService, InventoryConsumer
from agenda_studio.services.schedule_store import FirestoreScheduleStore, ScheduleStore
from agenda_studio.services.service_catalog import FirestoreServiceCatalog, ServiceCatalog

# Um canal por processo: ouvintes registrados no startup recebem tudo
notifier = ChangeNotifier()


def get_booking_store() -> BookingStore:
    return FirestoreBookingStore(core_db.db)


def get_schedule_store() -> ScheduleStore:
    return FirestoreScheduleStore(core_db.db)


def get_service_catalog() -> ServiceCatalog:
    return FirestoreServiceCatalog(core_db.db)


def get_inventory(catalog: ServiceCatalog = Depends(get_service_catalog)) -> InventoryConsumer:
    return FirestoreInventoryService(core_db.db, catalog)


def get_notifier() -> ChangeNotifier:
    return notifier


def get_resolver() -> OccupancyResolver:
    return OccupancyResolver()


def get_lifecycle(
    store: BookingStore = Depends(get_booking_store),
    inventory: InventoryConsumer = Depends(get_inventory),
    events: ChangeNotifier = Depends(get_notifier),
) -> BookingLifecycle:
    return BookingLifecycle(store, inventory=inventory, notifier=events)

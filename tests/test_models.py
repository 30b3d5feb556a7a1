"""
Tests for core/models.py and core/timeutils.py
"""

import unittest
from datetime import date

from agenda_studio.core.models import (
    BookingFieldsUpdate,
    BookingInput,
    BookingStatus,
    CompositeService,
    CustomerData,
    SlotStatus,
    TimeSlot,
)
from agenda_studio.core.timeutils import from_minutes, js_weekday, normalize_time, to_minutes
from tests.fakes import make_booking, make_service


class TestTimeUtils(unittest.TestCase):

    def test_minutes_conversion(self):
        self.assertEqual(to_minutes("09:30"), 570)
        self.assertEqual(from_minutes(570), "09:30")
        self.assertEqual(from_minutes(0), "00:00")

    def test_normalize_time(self):
        self.assertEqual(normalize_time("9:05"), "09:05")
        self.assertEqual(normalize_time("09:00:00"), "09:00")
        for bad in ("24:00", "9", "ab:cd", ""):
            with self.assertRaises(ValueError):
                normalize_time(bad)

    def test_js_weekday(self):
        self.assertEqual(js_weekday(date(2025, 6, 15)), 0)
        self.assertEqual(js_weekday(date(2025, 6, 14)), 6)


class TestBookingStatus(unittest.TestCase):

    def test_aliases(self):
        self.assertIs(BookingStatus("concluido"), BookingStatus.CONCLUIDO)
        self.assertIs(BookingStatus("completed"), BookingStatus.CONCLUIDO)
        self.assertIs(BookingStatus("Confirmed"), BookingStatus.CONFIRMADO)
        self.assertIs(BookingStatus("canceled"), BookingStatus.CANCELADO)
        self.assertIs(BookingStatus("pending"), BookingStatus.PENDENTE)
        with self.assertRaises(ValueError):
            BookingStatus("arquivado")

    def test_cancelled_is_inactive(self):
        self.assertFalse(make_booking(status="cancelled").is_active)
        self.assertTrue(make_booking(status=BookingStatus.PENDENTE).is_active)


class TestServices(unittest.TestCase):

    def test_composite_aggregates(self):
        composite = CompositeService.from_services([
            make_service("s1", "Corte", 60, 50.0),
            make_service("s2", "Barba", 30, 25.5),
        ])
        self.assertEqual(composite.id, "s1,s2")
        self.assertEqual(composite.name, "Corte + Barba")
        self.assertEqual(composite.duration, 90)
        self.assertAlmostEqual(composite.price, 75.5)
        self.assertEqual(len(composite.components), 2)

    def test_composite_requires_services(self):
        with self.assertRaises(ValueError):
            CompositeService.from_services([])

    def test_duration_must_be_positive(self):
        with self.assertRaises(ValueError):
            make_service(duration=0)


class TestBookingModels(unittest.TestCase):

    def test_booking_span(self):
        booking = make_booking(time="9:30", duration=45)
        self.assertEqual(booking.time, "09:30")
        self.assertEqual((booking.start_minutes, booking.end_minutes), (570, 615))

    def test_input_blank_contact_becomes_none(self):
        data = BookingInput(serviceId="s1", serviceName="Corte", serviceDuration=30, date="2025-06-10",
                            time="10:00", clientName="  Ana ", clientEmail="", clientPhone=" ")
        self.assertEqual(data.clientName, "Ana")
        self.assertIsNone(data.clientEmail)
        self.assertIsNone(data.clientPhone)
        self.assertEqual(data.status, BookingStatus.PENDENTE)

    def test_input_rejects_bad_email(self):
        with self.assertRaises(ValueError):
            CustomerData(name="Ana", email="sem-arroba")

    def test_fields_update_forbids_status(self):
        with self.assertRaises(ValueError):
            BookingFieldsUpdate(status="concluído")
        update = BookingFieldsUpdate(date="2025-06-12", time="8:00")
        self.assertEqual(update.date, date(2025, 6, 12))
        self.assertEqual(update.time, "08:00")


class TestTimeSlotStatus(unittest.TestCase):

    def test_precedence(self):
        self.assertEqual(TimeSlot(time="10:00", past=True, occupied_by="b1", conflict=True).status, SlotStatus.PAST)
        self.assertEqual(TimeSlot(time="10:00", occupied_by="b1", preview=True).status, SlotStatus.OCCUPIED)
        self.assertEqual(TimeSlot(time="10:00", conflict=True, preview=True).status, SlotStatus.CONFLICT)
        self.assertEqual(TimeSlot(time="10:00", preview=True).status, SlotStatus.PREVIEW)
        self.assertEqual(TimeSlot(time="10:00").status, SlotStatus.FREE)
        self.assertEqual(TimeSlot(time="10:00", occupied_by="b1").model_dump()["status"], SlotStatus.OCCUPIED)


if __name__ == "__main__":
    unittest.main()

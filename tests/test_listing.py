"""
Tests for scheduling/listing.py
"""

import unittest
from datetime import date

from agenda_studio.core.models import BookingStatus
from agenda_studio.scheduling.listing import count_by_status, filter_bookings
from tests.fakes import make_booking


class TestListing(unittest.TestCase):

    def setUp(self):
        self.bookings = [
            make_booking("b3", day=date(2025, 6, 12), time="14:00", clientName="Carla",
                         status=BookingStatus.PENDENTE),
            make_booking("b1", day=date(2025, 6, 10), time="09:30", clientName="Ana",
                         serviceName="Escova"),
            make_booking("b2", day=date(2025, 6, 10), time="09:00", clientName="Bruno",
                         status=BookingStatus.CANCELADO),
            make_booking("b4", day=date(2025, 6, 11), time="10:00", clientName="Diana",
                         status=BookingStatus.CONCLUIDO),
        ]

    def ids(self, **filters):
        return [b.id for b in filter_bookings(self.bookings, **filters)]

    def test_sorted_by_date_then_time(self):
        self.assertEqual(self.ids(), ["b2", "b1", "b4", "b3"])

    def test_date_filters(self):
        self.assertEqual(self.ids(day=date(2025, 6, 10)), ["b2", "b1"])
        self.assertEqual(self.ids(start=date(2025, 6, 11)), ["b4", "b3"])
        self.assertEqual(self.ids(end=date(2025, 6, 11)), ["b2", "b1", "b4"])

    def test_search_matches_client_or_service(self):
        self.assertEqual(self.ids(search="ANA"), ["b1", "b4"])
        self.assertEqual(self.ids(search="escova"), ["b1"])

    def test_time_substring_and_status(self):
        self.assertEqual(self.ids(time="09"), ["b2", "b1"])
        self.assertEqual(self.ids(status=BookingStatus.CANCELADO), ["b2"])

    def test_count_by_status(self):
        counts = count_by_status(self.bookings)
        self.assertEqual(counts["todos"], 4)
        self.assertEqual(counts["pendente"], 1)
        self.assertEqual(counts["confirmado"], 1)
        self.assertEqual(counts["concluído"], 1)
        self.assertEqual(counts["cancelado"], 1)
        self.assertEqual(count_by_status([])["todos"], 0)


if __name__ == "__main__":
    unittest.main()

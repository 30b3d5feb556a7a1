"""
End-to-end examples of grid generation, occupancy, preview, blocking and conflicts.
"""

import unittest
from datetime import date, datetime

from agenda_studio.core.models import BlockedPeriod, DaySchedule, SlotStatus
from agenda_studio.scheduling.blocked import BlockedPeriodSet
from agenda_studio.scheduling.grid import FullDayGrid
from agenda_studio.scheduling.occupancy import OccupancyResolver
from tests.fakes import fixed_clock, make_booking, make_service

DAY = date(2025, 6, 10)
SCHEDULE = DaySchedule(dayOfWeek=2, isOpen=True, openTime="09:00", closeTime="18:00", interval=30)


class TestScenarios(unittest.TestCase):

    def setUp(self):
        self.resolver = OccupancyResolver(grid=FullDayGrid(), clock=fixed_clock(datetime(2025, 6, 1, 12, 0)))

    def test_full_day_grid_and_occupancy(self):
        slots = FullDayGrid().generate(SCHEDULE)
        self.assertEqual(len(slots), 48)
        self.assertEqual((slots[0], slots[-1]), ("00:00", "23:30"))

        classified = {s.time: s.status for s in self.resolver.classify(
            DAY, SCHEDULE, [make_booking(time="10:00", duration=45)]
        )}
        self.assertEqual(classified["10:00"], SlotStatus.OCCUPIED)
        self.assertEqual(classified["10:30"], SlotStatus.OCCUPIED)
        self.assertEqual(classified["11:00"], SlotStatus.FREE)

    def test_preview_of_selected_start(self):
        classified = {s.time: s.status for s in self.resolver.classify(
            DAY, SCHEDULE, [], candidate=make_service(duration=60), selected_time="14:00"
        )}
        self.assertEqual(classified["14:00"], SlotStatus.PREVIEW)
        self.assertEqual(classified["14:30"], SlotStatus.PREVIEW)
        self.assertEqual(classified["15:00"], SlotStatus.FREE)

    def test_whole_day_block(self):
        blocked = BlockedPeriodSet([BlockedPeriod(date="2024-12-25")])
        self.assertTrue(blocked.is_blocked("2024-12-25", "09:00"))
        self.assertTrue(blocked.is_blocked("2024-12-25", "23:59"))

    def test_off_grid_candidate_conflicts(self):
        bookings = [make_booking(time="10:00", duration=30)]
        self.assertTrue(self.resolver.conflicts_for(DAY, "10:15", 30, bookings))
        self.assertFalse(self.resolver.conflicts_for(DAY, "10:30", 30, bookings))


if __name__ == "__main__":
    unittest.main()

"""
Tests for scheduling/occupancy.py

Occupancy, conflict and preview marks over the grid, plus client availability.
"""

import unittest
from datetime import date, datetime

from agenda_studio.core.models import BlockedPeriod, BookingStatus, DaySchedule, SlotStatus
from agenda_studio.scheduling.blocked import BlockedPeriodSet
from agenda_studio.scheduling.grid import BoundedGrid, FullDayGrid
from agenda_studio.scheduling.occupancy import OccupancyResolver, slots_needed, spans_overlap
from tests.fakes import fixed_clock, make_booking, make_service

DAY = date(2025, 6, 10)
BEFORE_DAY = datetime(2025, 6, 9, 8, 0)

SCHEDULE = DaySchedule(dayOfWeek=2, isOpen=True, openTime="09:00", closeTime="18:00",
                       lunchStart="12:00", lunchEnd="13:00", interval=30)


def by_time(slots):
    return {s.time: s for s in slots}


class TestOverlapHelpers(unittest.TestCase):

    def test_spans_overlap_is_half_open(self):
        self.assertTrue(spans_overlap(540, 600, 570, 630))
        self.assertFalse(spans_overlap(540, 600, 600, 660))
        self.assertFalse(spans_overlap(600, 660, 540, 600))

    def test_conflict_is_symmetric(self):
        pairs = [(540, 600, 570, 630), (540, 600, 600, 660), (0, 30, 10, 20), (100, 200, 50, 99)]
        for a1, a2, b1, b2 in pairs:
            self.assertEqual(spans_overlap(a1, a2, b1, b2), spans_overlap(b1, b2, a1, a2))

    def test_slots_needed_rounds_up(self):
        self.assertEqual(slots_needed(60, 30), 2)
        self.assertEqual(slots_needed(45, 30), 2)
        self.assertEqual(slots_needed(30, 30), 1)
        self.assertEqual(slots_needed(90, 60), 2)


class TestClassify(unittest.TestCase):

    def setUp(self):
        self.resolver = OccupancyResolver(grid=FullDayGrid(), clock=fixed_clock(BEFORE_DAY))

    def test_occupied_slots_cover_booking_duration(self):
        bookings = [make_booking(time="10:00", duration=90)]
        slots = by_time(self.resolver.classify(DAY, SCHEDULE, bookings))
        self.assertEqual(slots["09:30"].status, SlotStatus.FREE)
        for time in ("10:00", "10:30", "11:00"):
            self.assertEqual(slots[time].status, SlotStatus.OCCUPIED)
            self.assertEqual(slots[time].occupied_by, "b1")
        self.assertEqual(slots["11:30"].status, SlotStatus.FREE)

    def test_cancelled_bookings_never_occupy(self):
        bookings = [make_booking(time="10:00", status=BookingStatus.CANCELADO)]
        slots = by_time(self.resolver.classify(DAY, SCHEDULE, bookings, candidate=make_service(duration=60)))
        self.assertEqual(slots["10:00"].status, SlotStatus.FREE)
        self.assertFalse(slots["09:30"].conflict)

    def test_conflict_marks_slots_whose_span_reaches_booking(self):
        # Scenario B: 60-min service against a booking at 10:00-11:00
        bookings = [make_booking(time="10:00", duration=60)]
        slots = by_time(self.resolver.classify(DAY, SCHEDULE, bookings, candidate=make_service(duration=60)))
        self.assertEqual(slots["09:30"].status, SlotStatus.CONFLICT)
        self.assertEqual(slots["09:00"].status, SlotStatus.FREE)
        self.assertEqual(slots["11:00"].status, SlotStatus.FREE)

    def test_preview_marks_selected_span(self):
        slots = by_time(self.resolver.classify(
            DAY, SCHEDULE, [], candidate=make_service(duration=90), selected_time="14:00",
        ))
        self.assertEqual(
            [t for t, s in slots.items() if s.status == SlotStatus.PREVIEW],
            ["14:00", "14:30", "15:00"],
        )

    def test_past_has_highest_precedence(self):
        resolver = OccupancyResolver(grid=FullDayGrid(), clock=fixed_clock(datetime(2025, 6, 10, 10, 15)))
        bookings = [make_booking(time="09:00", duration=120)]
        slots = by_time(resolver.classify(DAY, SCHEDULE, bookings, candidate=make_service()))
        self.assertEqual(slots["09:30"].status, SlotStatus.PAST)
        self.assertEqual(slots["10:00"].status, SlotStatus.PAST)
        self.assertEqual(slots["10:30"].status, SlotStatus.OCCUPIED)

    def test_whole_day_in_past(self):
        resolver = OccupancyResolver(grid=BoundedGrid(), clock=fixed_clock(datetime(2025, 6, 11, 0, 5)))
        slots = resolver.classify(DAY, SCHEDULE, [])
        self.assertTrue(all(s.past for s in slots))

    def test_blocked_flag(self):
        blocked = BlockedPeriodSet([BlockedPeriod(date=DAY, startTime="15:00", endTime="16:00")])
        slots = by_time(self.resolver.classify(DAY, SCHEDULE, [], blocked=blocked))
        self.assertTrue(slots["15:30"].blocked)
        self.assertFalse(slots["16:00"].blocked)

    def test_other_dates_ignored(self):
        bookings = [make_booking(day=date(2025, 6, 11), time="10:00")]
        slots = by_time(self.resolver.classify(DAY, SCHEDULE, bookings))
        self.assertIsNone(slots["10:00"].occupied_by)

    def test_occupying_booking_and_conflicts(self):
        bookings = [make_booking("b1", time="10:00"), make_booking("b2", time="11:00")]
        self.assertEqual(self.resolver.occupying_booking(DAY, "10:45", bookings).id, "b1")
        self.assertIsNone(self.resolver.occupying_booking(DAY, "12:00", bookings))
        conflicts = self.resolver.conflicts_for(DAY, "10:30", 60, bookings)
        self.assertEqual([b.id for b in conflicts], ["b1", "b2"])
        self.assertEqual(self.resolver.conflicts_for(DAY, "10:30", 60, bookings, exclude_ids=["b1"])[0].id, "b2")


class TestAvailability(unittest.TestCase):

    def setUp(self):
        self.resolver = OccupancyResolver(clock=fixed_clock(BEFORE_DAY))

    def available(self, duration, bookings=(), blocked=None):
        result = self.resolver.availability(DAY, duration, SCHEDULE, blocked or BlockedPeriodSet(), bookings)
        return {s.time: s.available for s in result}

    def test_lunch_and_close_time(self):
        slots = self.available(60)
        self.assertTrue(slots["11:00"])
        self.assertFalse(slots["11:30"])
        self.assertTrue(slots["17:00"])
        self.assertFalse(slots["17:30"])

    def test_existing_booking(self):
        slots = self.available(60, [make_booking(time="14:00")])
        self.assertFalse(slots["13:30"])
        self.assertFalse(slots["14:30"])
        self.assertTrue(slots["15:00"])

    def test_blocks(self):
        whole = BlockedPeriodSet([BlockedPeriod(date=DAY)])
        self.assertFalse(any(self.available(30, blocked=whole).values()))
        partial = BlockedPeriodSet([BlockedPeriod(date=DAY, startTime="15:00", endTime="16:00")])
        slots = self.available(60, blocked=partial)
        self.assertFalse(slots["14:30"])
        self.assertTrue(slots["16:00"])

    def test_closed_day_has_no_slots(self):
        closed = SCHEDULE.model_copy(update={"isOpen": False})
        self.assertEqual(self.resolver.availability(DAY, 30, closed, BlockedPeriodSet(), []), [])


if __name__ == "__main__":
    unittest.main()

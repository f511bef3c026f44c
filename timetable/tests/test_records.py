import unittest
from datetime import datetime, timedelta, timezone

from timetable.records import (
    Collection,
    MissingFieldsError,
    Schedule,
    ServerLink,
    format_iso,
    newest_first,
    next_local_id,
    parse_iso,
    require_fields,
)


class CollectionTests(unittest.TestCase):
    def test_names_and_slots(self):
        self.assertEqual(Collection.SCHEDULES.table_name, "train_schedules")
        self.assertEqual(Collection.SERVER_LINKS.table_name, "server_links")
        self.assertEqual(Collection.SCHEDULES.storage_key, "trainSchedules")
        self.assertEqual(Collection.SERVER_LINKS.storage_key, "serverLinks")
        self.assertIs(Collection.SCHEDULES.record_type, Schedule)
        self.assertIs(Collection.SERVER_LINKS.record_type, ServerLink)


class TimestampTests(unittest.TestCase):
    def test_format_iso_uses_milliseconds_and_z(self):
        value = datetime(2025, 5, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)
        self.assertEqual(format_iso(value), "2025-05-01T12:30:15.123Z")

    def test_format_iso_converts_to_utc(self):
        warsaw_summer = timezone(timedelta(hours=2))
        value = datetime(2025, 5, 1, 14, 0, 0, tzinfo=warsaw_summer)
        self.assertEqual(format_iso(value), "2025-05-01T12:00:00.000Z")

    def test_parse_iso_accepts_z_suffix(self):
        parsed = parse_iso("2025-05-01T12:30:15.123Z")
        self.assertEqual(parsed.tzinfo, timezone.utc)
        self.assertEqual(parsed.microsecond, 123000)

    def test_parse_iso_treats_naive_as_utc(self):
        parsed = parse_iso("2025-05-01T12:30:15")
        self.assertEqual(parsed.utcoffset(), timedelta(0))


class LocalIdTests(unittest.TestCase):
    def test_millisecond_epoch(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        self.assertEqual(next_local_id([], now), str(int(now.timestamp() * 1000)))

    def test_bumped_past_taken_ids(self):
        now = datetime(2025, 1, 1, tzinfo=timezone.utc)
        base = int(now.timestamp() * 1000)
        taken = [str(base), str(base + 1)]
        self.assertEqual(next_local_id(taken, now), str(base + 2))


class ScheduleTests(unittest.TestCase):
    def test_missing_fields(self):
        schedule = Schedule(train_number="IC 5103", route="", departure="08:30", arrival="")
        self.assertEqual(schedule.missing_fields(), ["route", "arrival"])
        with self.assertRaises(MissingFieldsError) as ctx:
            require_fields(schedule)
        self.assertEqual(ctx.exception.fields, ["route", "arrival"])

    def test_optional_fields_are_not_required(self):
        schedule = Schedule(
            train_number="IC 5103",
            route="Warszawa - Kraków",
            departure="08:30",
            arrival="11:45",
        )
        require_fields(schedule)

    def test_as_dict_omits_empty_document(self):
        schedule = Schedule(
            train_number="IC 5103",
            route="Warszawa - Kraków",
            departure="08:30",
            arrival="11:45",
            id="1",
            created_at=datetime(2025, 5, 1, tzinfo=timezone.utc),
        )
        payload = schedule.as_dict()
        self.assertNotIn("pdf_file", payload)
        self.assertEqual(payload["created_at"], "2025-05-01T00:00:00.000Z")

    def test_from_dict_tolerates_missing_optionals(self):
        schedule = Schedule.from_dict(
            {
                "id": 1714521600000,
                "train_number": "IC 5103",
                "route": "Warszawa - Kraków",
                "departure": "08:30",
                "arrival": "11:45",
                "created_at": "2025-05-01T00:00:00.000Z",
            }
        )
        self.assertEqual(schedule.id, "1714521600000")
        self.assertEqual(schedule.stations, "")
        self.assertIsNone(schedule.pdf_file)

    def test_server_link_missing_fields(self):
        self.assertEqual(ServerLink(name="", url="").missing_fields(), ["name", "url"])


class OrderingTests(unittest.TestCase):
    def test_newest_first_is_stable(self):
        t0 = datetime(2025, 1, 1, tzinfo=timezone.utc)
        older = ServerLink(name="a", url="u", id="a", created_at=t0)
        tie_1 = ServerLink(name="b", url="u", id="b", created_at=t0 + timedelta(seconds=1))
        tie_2 = ServerLink(name="c", url="u", id="c", created_at=t0 + timedelta(seconds=1))
        ordered = newest_first([older, tie_1, tie_2])
        self.assertEqual([r.id for r in ordered], ["b", "c", "a"])


if __name__ == "__main__":
    unittest.main()

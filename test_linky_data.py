import unittest
from unittest.mock import patch, Mock
from datetime import date, datetime
import pandas as pd
from geredis_pipeline.geredis_api import GeredisError
from geredis_pipeline.linky_data import LinkyGeredisClient, is_before

TODAY = date(2024, 6, 30)

load_curve_response = {
    "interval_reading": [
        {"value": "1000", "date": "2024-06-29 00:30:00", "interval_length": "PT30M"},
        {"value": "2000", "date": "2024-06-29 01:00:00", "interval_length": "PT30M"},
    ]
}
recent_daily_response = {"interval_reading": [{"value": "12000", "date": "2024-03-31"}]}
older_daily_response = {"interval_reading": [{"value": "10000", "date": "2023-10-04"}]}


def api_error(description):
    return GeredisError(
        f"400 {description}",
        status_code=400,
        response={"error": "ADAM-ERR0123", "error_description": description},
    )


@patch("geredis_pipeline.linky_data.today", return_value=TODAY)
class TestLinkyGeredisClient(unittest.TestCase):
    def make_client(self, load_curve, daily):
        session = Mock()
        session.get_load_curve.side_effect = load_curve
        session.get_daily_consumption.side_effect = daily
        return LinkyGeredisClient("user", "secret", session=session), session

    def test_full_backfill_is_chronological(self, _today):
        client, session = self.make_client(
            [load_curve_response], [recent_daily_response, older_daily_response]
        )
        stats = client.get_energy_data(None)

        session.get_load_curve.assert_called_once_with("2024-04-01", "2024-06-30")
        self.assertEqual(
            [c.args for c in session.get_daily_consumption.call_args_list],
            [("2023-10-05", "2024-04-01"), ("2023-04-09", "2023-10-05")],
        )
        self.assertEqual(
            [s["start"] for s in stats],
            ["2023-10-04T00:00:00", "2024-03-31T00:00:00", "2024-06-29T00:00:00"],
        )
        self.assertEqual([s["state"] for s in stats], [10000.0, 12000.0, 1500.0])
        self.assertEqual([s["sum"] for s in stats], [10000.0, 22000.0, 23500.0])

    def test_first_day_inside_load_curve_window_skips_daily_phase(self, _today):
        client, session = self.make_client([load_curve_response], [])
        stats = client.get_energy_data(date(2024, 6, 20))

        session.get_load_curve.assert_called_once_with("2024-06-20", "2024-06-30")
        session.get_daily_consumption.assert_not_called()
        self.assertEqual(len(stats), 1)

    def test_first_day_accepts_datetime_and_timestamp(self, _today):
        for first_day in (datetime(2024, 6, 20, 18, 45), pd.Timestamp("2024-06-20 07:00:00")):
            client, session = self.make_client([load_curve_response], [])
            stats = client.get_energy_data(first_day)

            session.get_load_curve.assert_called_once_with("2024-06-20", "2024-06-30")
            session.get_daily_consumption.assert_not_called()
            self.assertEqual(len(stats), 1)

    def test_timestamp_first_day_clamps_daily_window(self, _today):
        client, session = self.make_client([load_curve_response], [recent_daily_response])
        client.get_energy_data(pd.Timestamp("2024-01-01 23:30:00"))

        session.get_daily_consumption.assert_called_once_with("2024-01-01", "2024-04-01")

    def test_first_day_on_window_start_counts_as_reached(self, _today):
        client, session = self.make_client([load_curve_response], [])
        client.get_energy_data(date(2024, 4, 1))

        session.get_load_curve.assert_called_once_with("2024-04-01", "2024-06-30")
        session.get_daily_consumption.assert_not_called()

    def test_first_day_clamps_daily_window_and_stops(self, _today):
        client, session = self.make_client([load_curve_response], [recent_daily_response])
        client.get_energy_data(date(2024, 1, 1))

        session.get_daily_consumption.assert_called_once_with("2024-01-01", "2024-04-01")

    def test_end_of_history_stops_without_error(self, _today):
        client, session = self.make_client(
            [load_curve_response],
            [api_error("The start date must be greater than the history deadline.")],
        )
        with self.assertLogs("geredis_pipeline.linky_data", level="INFO") as logs:
            stats = client.get_energy_data(None)

        self.assertEqual(session.get_daily_consumption.call_count, 1)
        self.assertEqual(len(stats), 1)
        self.assertIn("All available consumption data has been imported", "\n".join(logs.output))
        self.assertFalse(any(line.startswith("WARNING") for line in logs.output))

    def test_end_of_history_with_first_day_is_reported(self, _today):
        client, session = self.make_client(
            [load_curve_response],
            [api_error("no measure found for this usage point")],
        )
        with self.assertLogs("geredis_pipeline.linky_data", level="INFO") as logs:
            stats = client.get_energy_data(date(2020, 1, 1))

        self.assertEqual(session.get_daily_consumption.call_count, 1)
        self.assertEqual(len(stats), 1)
        self.assertTrue(any(line.startswith("WARNING") for line in logs.output))
        self.assertNotIn("All available consumption data has been imported", "\n".join(logs.output))

    def test_unknown_daily_error_stops_after_one_attempt(self, _today):
        client, session = self.make_client([load_curve_response], [api_error("Internal error")])
        stats = client.get_energy_data(None)

        self.assertEqual(session.get_daily_consumption.call_count, 1)
        self.assertEqual([s["state"] for s in stats], [1500.0])

    def test_load_curve_failure_does_not_advance_offset(self, _today):
        client, session = self.make_client(
            [api_error("Internal error")], [recent_daily_response, older_daily_response]
        )
        stats = client.get_energy_data(None)

        self.assertEqual(
            session.get_daily_consumption.call_args_list[0].args, ("2024-01-03", "2024-06-30")
        )
        self.assertEqual(len(stats), 2)
        self.assertEqual(stats[0]["start"], "2023-10-04T00:00:00")

    def test_all_requests_failing_returns_empty(self, _today):
        client, _session = self.make_client(
            [api_error("Internal error")], [api_error("Internal error")]
        )
        with self.assertLogs("geredis_pipeline.linky_data", level="WARNING") as logs:
            stats = client.get_energy_data(None)

        self.assertEqual(stats, [])
        self.assertIn("Data import returned nothing !", "\n".join(logs.output))

    def test_malformed_response_is_swallowed(self, _today):
        client, session = self.make_client([{"reading_type": {}}], [api_error("Internal error")])
        self.assertEqual(client.get_energy_data(None), [])
        session.get_daily_consumption.assert_called_once_with("2024-01-03", "2024-06-30")


class TestIsBefore(unittest.TestCase):
    def test_comparison(self):
        self.assertTrue(is_before(date(2024, 1, 1), date(2024, 1, 2)))
        self.assertTrue(is_before(date(2024, 1, 2), date(2024, 1, 2)))
        self.assertFalse(is_before(date(2024, 1, 3), date(2024, 1, 2)))
        self.assertFalse(is_before(date(2024, 1, 3), None))

    def test_compares_calendar_days(self):
        self.assertTrue(is_before(date(2024, 1, 2), datetime(2024, 1, 2, 0, 1)))
        self.assertTrue(is_before(datetime(2024, 1, 2, 23, 0), pd.Timestamp("2024-01-02 01:00")))
        self.assertFalse(is_before(pd.Timestamp("2024-01-03"), datetime(2024, 1, 2, 23, 59)))


if __name__ == "__main__":
    unittest.main()

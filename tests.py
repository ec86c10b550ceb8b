"""
Unit tests for PUNCHCARD
"""
import io
import unittest
from unittest import mock

from loguru import logger
from typer.testing import CliRunner

from punch_input import InputCursor, EndOfInput, DELIMITER_FOUND, NEWLINE_FOUND, END_OF_INPUT
from punch_processor import (
    PunchProcessor, ClockTime, Duration, DaySummary,
    HOUR_TOO_SMALL, HOUR_TOO_BIG, MINUTE_TOO_SMALL, MINUTE_TOO_BIG,
    UNRECOGNIZED_MERIDIEM, UNREADABLE_TIME,
)
from punch_session import (
    DaySession, run_punchcard, ALL_PAIRS_READ, STOP_REQUESTED, ABORT_REQUESTED, PROMPT,
)
from punchcard import app, _setup_logging


def setUpModule():
    # Keep library debug records out of the test output
    logger.remove()


class TestInputCursor(unittest.TestCase):
    """Test the scan-to-delimiter primitive"""

    def test_scan_to_delimiter(self):
        cursor = InputCursor("pm , 2:00pm")
        self.assertEqual(cursor.scan_to(','), DELIMITER_FOUND)
        self.assertEqual(cursor.read(), ' ')

    def test_scan_to_newline(self):
        cursor = InputCursor("m junk\nnext")
        self.assertEqual(cursor.scan_to(','), NEWLINE_FOUND)
        self.assertEqual(cursor.read(), 'n')

    def test_scan_to_end_of_input(self):
        cursor = InputCursor("m")
        self.assertEqual(cursor.scan_to(','), END_OF_INPUT)
        self.assertTrue(cursor.at_end())

    def test_read_integer_signed(self):
        cursor = InputCursor("-15:")
        self.assertEqual(cursor.read_integer(), -15)
        self.assertEqual(cursor.peek(), ':')

    def test_read_integer_no_digits(self):
        cursor = InputCursor("x1")
        self.assertIsNone(cursor.read_integer())
        self.assertEqual(cursor.peek(), 'x')


class TestTimeParser(unittest.TestCase):
    """Test parsing and validation of single times"""

    def setUp(self):
        self.processor = PunchProcessor()

    def test_parse_morning_time(self):
        outcome = self.processor.parse_time("9:05am")
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.clock, ClockTime(9, 5, 'a'))

    def test_parse_uppercase_with_spaces(self):
        outcome = self.processor.parse_time("  12 : 30 P")
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.clock, ClockTime(12, 30, 'p'))

    def test_only_first_meridiem_letter_consumed(self):
        cursor = InputCursor("3:15pm-4:00pm")
        outcome = self.processor.scan_time(cursor)
        self.assertEqual(outcome.clock, ClockTime(3, 15, 'p'))
        self.assertEqual(cursor.read(), 'm')

    def test_hour_zero_is_too_small(self):
        outcome = self.processor.parse_time("0:30am")
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.violations, (HOUR_TOO_SMALL,))
        self.assertEqual(outcome.messages(),
                         ['[ERROR]\tHOUR TOO SMALL: "0", should be greater than 0.'])

    def test_hour_too_big(self):
        outcome = self.processor.parse_time("13:00pm")
        self.assertEqual(outcome.violations, (HOUR_TOO_BIG,))
        self.assertIn('HOUR TOO BIG: "13"', outcome.messages()[0])

    def test_all_violations_reported(self):
        """Every failed check shows up, not just the first"""
        outcome = self.processor.parse_time("0:60x")
        self.assertIsNone(outcome.clock)
        self.assertEqual(outcome.violations,
                         (HOUR_TOO_SMALL, MINUTE_TOO_BIG, UNRECOGNIZED_MERIDIEM))
        self.assertEqual(len(outcome.messages()), 3)
        self.assertIn('UNRECOGNIZED MERIDIEM: "xm"', outcome.messages()[2])

    def test_negative_minute(self):
        outcome = self.processor.parse_time("13:-5pm")
        self.assertEqual(outcome.violations, (HOUR_TOO_BIG, MINUTE_TOO_SMALL))
        self.assertIn('MINUTE TOO SMALL: "-5"', outcome.messages()[1])

    def test_missing_meridiem_before_newline(self):
        cursor = InputCursor("9:00\n")
        outcome = self.processor.scan_time(cursor)
        self.assertEqual(outcome.violations, (UNRECOGNIZED_MERIDIEM,))
        # The newline is left for the caller to discard
        self.assertEqual(cursor.peek(), '\n')

    def test_unreadable_time(self):
        outcome = self.processor.parse_time("noon-3pm")
        self.assertEqual(outcome.violations, (UNREADABLE_TIME,))
        self.assertIn('UNREADABLE TIME', outcome.messages()[0])

    def test_missing_colon(self):
        outcome = self.processor.parse_time("9am")
        self.assertEqual(outcome.violations, (UNREADABLE_TIME,))
        self.assertEqual(outcome.raw_hour, 9)

    def test_non_ascii_digits_are_unreadable(self):
        for text in ("\u00b2:00am", "9:\u2460\u2460am"):
            outcome = self.processor.parse_time(text)
            self.assertEqual(outcome.violations, (UNREADABLE_TIME,), text)

    def test_empty_input_raises(self):
        with self.assertRaises(EndOfInput):
            self.processor.parse_time("   \n ")

    def test_truncated_time_raises(self):
        with self.assertRaises(EndOfInput):
            self.processor.parse_time("9:00")


class TestTimeConversion(unittest.TestCase):
    """Test conversion of 12-hour times to minutes since midnight"""

    def setUp(self):
        self.processor = PunchProcessor()

    def test_midnight(self):
        self.assertEqual(self.processor.time_to_minutes(ClockTime(12, 0, 'a')), 0)

    def test_noon(self):
        self.assertEqual(self.processor.time_to_minutes(ClockTime(12, 0, 'p')), 720)

    def test_evening(self):
        # 8:37pm = 20:37 = 1237 minutes
        self.assertEqual(self.processor.time_to_minutes(ClockTime(8, 37, 'p')), 1237)

    def test_every_clock_time_maps_to_a_distinct_minute(self):
        seen = set()
        for meridiem in ('a', 'p'):
            for hour in range(1, 13):
                for minute in range(60):
                    value = self.processor.time_to_minutes(ClockTime(hour, minute, meridiem))
                    self.assertTrue(0 <= value <= 1439)
                    seen.add(value)
        self.assertEqual(len(seen), 1440)


class TestDurationCalculation(unittest.TestCase):
    """Test elapsed time between two times"""

    def setUp(self):
        self.processor = PunchProcessor()

    def test_same_day(self):
        self.assertEqual(self.processor.calculate_duration(540, 1020), Duration(8, 0))

    def test_equal_times_give_zero(self):
        for value in (0, 720, 1439):
            self.assertEqual(self.processor.calculate_duration(value, value), Duration(0, 0))

    def test_wraps_past_midnight(self):
        start = self.processor.time_to_minutes(ClockTime(11, 59, 'p'))
        end = self.processor.time_to_minutes(ClockTime(12, 1, 'a'))
        self.assertEqual(self.processor.calculate_duration(start, end), Duration(0, 2))

    def test_longest_shift(self):
        # 8:00pm to 7:59pm the next day
        self.assertEqual(self.processor.calculate_duration(1200, 1199), Duration(23, 59))


class TestRounding(unittest.TestCase):
    """Test quarter hour rounding"""

    def setUp(self):
        self.processor = PunchProcessor()

    def test_rounding_boundaries(self):
        table = {
            0: 0, 7: 0, 8: 15, 22: 15, 23: 30,
            37: 30, 38: 45, 52: 45,
        }
        for minutes, expected in table.items():
            self.assertEqual(self.processor.round_time(3, minutes), Duration(3, expected),
                             f"{minutes} minutes")

    def test_rounding_carries_into_next_hour(self):
        self.assertEqual(self.processor.round_time(3, 53), Duration(4, 0))
        self.assertEqual(self.processor.round_time(23, 59), Duration(24, 0))

    def test_decimal_hours(self):
        self.assertEqual(self.processor.to_decimal_hours(6, 30), 6.5)
        self.assertEqual(self.processor.format_decimal_hours(8, 2), "8.03 hours")


class TestDaySummary(unittest.TestCase):

    def test_accumulation_carries_minutes(self):
        summary = DaySummary().add(Duration(1, 40)).add(Duration(0, 45))
        self.assertEqual(summary, DaySummary(2, 25))

    def test_totals_may_exceed_a_day(self):
        summary = DaySummary().add(Duration(23, 59)).add(Duration(23, 59))
        self.assertEqual(summary, DaySummary(47, 58))


class TestDaySession(unittest.TestCase):
    """Test one day of pairs"""

    def setUp(self):
        self.lines = []

    def run_session(self, text):
        return DaySession(InputCursor(text), self.lines.append).run()

    def test_single_pair(self):
        result = self.run_session("9:00am-5:00pm\n")
        self.assertEqual(result.status, ALL_PAIRS_READ)
        self.assertEqual(result.summary, DaySummary(8, 0))
        self.assertFalse(result.end_of_input)
        self.assertIn("START:\t09:00am", self.lines)
        self.assertIn("END:\t05:00pm", self.lines)
        self.assertIn("ACTUAL TIME:\t08 hours and 00 minutes.", self.lines)

    def test_several_pairs(self):
        result = self.run_session("9:00am-1:00pm, 2:00pm-4:30pm\n")
        self.assertEqual(result.status, ALL_PAIRS_READ)
        self.assertEqual(result.pairs, 2)
        self.assertEqual(result.summary, DaySummary(6, 30))

    def test_end_of_input_finishes_day(self):
        result = self.run_session("9:00am-5:00pm")
        self.assertEqual(result.status, ALL_PAIRS_READ)
        self.assertTrue(result.end_of_input)

    def test_identical_pair_stops(self):
        result = self.run_session("9:00am-5:00pm, 1:00pm-1:00pm, 6:00pm-7:00pm\n")
        self.assertEqual(result.status, STOP_REQUESTED)

    def test_bad_start_aborts(self):
        cursor = InputCursor("13:00pm-2:00pm\nnext")
        result = DaySession(cursor, self.lines.append).run()
        self.assertEqual(result.status, ABORT_REQUESTED)
        self.assertIn('[ERROR]\tHOUR TOO BIG: "13", should be less than 13.', self.lines)
        self.assertIn("Something was wrong with your given start time!", self.lines)
        # Rest of the line was thrown away
        self.assertEqual(cursor.read(), 'n')

    def test_bad_second_pair_discards_day(self):
        result = self.run_session("9:00am-5:00pm, 6:00pm-7:75pm\n")
        self.assertEqual(result.status, ABORT_REQUESTED)
        self.assertIsNone(result.summary)
        self.assertIn("Something was wrong with your given end time!", self.lines)

    def test_missing_end_time(self):
        result = self.run_session("9:00am\n")
        self.assertEqual(result.status, ABORT_REQUESTED)
        self.assertIn('[ERROR]\tMISSING END TIME: expected "-" after the start time.', self.lines)

    def test_trailing_comma_at_end_of_input(self):
        result = self.run_session("9:00am-5:00pm, ")
        self.assertEqual(result.status, ALL_PAIRS_READ)
        self.assertEqual(result.summary, DaySummary(8, 0))
        self.assertTrue(result.end_of_input)

    def test_trailing_comma_before_newline(self):
        cursor = InputCursor("9:00am-5:00pm,\n1:00pm-2:00pm\n")
        result = DaySession(cursor, self.lines.append).run()
        self.assertEqual(result.status, ALL_PAIRS_READ)
        self.assertEqual(result.pairs, 1)
        self.assertFalse(result.end_of_input)
        self.assertEqual(cursor.read(), "1")

    def test_stream_ending_mid_pair_raises(self):
        with self.assertRaises(EndOfInput):
            self.run_session("9:00am-")


class TestPunchcard(unittest.TestCase):
    """End to end runs of the program loop"""

    def run_program(self, text):
        lines = []
        days = run_punchcard(io.StringIO(text), lines.append)
        return days, "\n".join(lines)

    def test_full_day(self):
        days, output = self.run_program("9:00am-5:00pm\n")
        self.assertEqual(days, 1)
        self.assertIn("TOTAL ACTUAL TIME:\t08 hours and 00 minutes (8.00 hours).", output)
        self.assertIn("ROUNDED TIME:\t8.00 hours.", output)

    def test_small_remainder_rounds_down(self):
        days, output = self.run_program("9:10am-5:12pm\n")
        self.assertIn("ACTUAL TIME:\t08 hours and 02 minutes.", output)
        self.assertIn("ROUNDED TIME:\t8.00 hours.", output)

    def test_wraparound_rounds_up_to_next_hour(self):
        days, output = self.run_program("8:00pm-7:59pm\n")
        self.assertIn("ACTUAL TIME:\t23 hours and 59 minutes.", output)
        self.assertIn("ROUNDED TIME:\t24.00 hours.", output)

    def test_split_day(self):
        days, output = self.run_program("9:00am-1:00pm, 2:00pm-4:30pm\n")
        self.assertIn("TOTAL ACTUAL TIME:\t06 hours and 30 minutes (6.50 hours).", output)
        self.assertIn("ROUNDED TIME:\t6.50 hours.", output)

    def test_several_days(self):
        days, output = self.run_program("9:00am-5:00pm\n8:00am-12:20pm\n")
        self.assertEqual(days, 2)
        self.assertIn("ROUNDED TIME:\t4.25 hours.", output)

    def test_stop_pair_ends_program(self):
        days, output = self.run_program("9:00am-5:00pm, 1:00pm-1:00pm\n9:00am-10:00am\n")
        self.assertEqual(days, 0)
        self.assertNotIn("ROUNDED TIME", output)
        self.assertEqual(output.count(PROMPT), 1)

    def test_bad_day_is_retried(self):
        days, output = self.run_program("13:00pm-2:00pm\n9:00am-5:00pm\n")
        self.assertEqual(days, 1)
        self.assertIn('HOUR TOO BIG: "13"', output)
        self.assertEqual(output.count("ROUNDED TIME:"), 1)
        self.assertIn("ROUNDED TIME:\t8.00 hours.", output)

    def test_odd_digit_characters_are_retried(self):
        days, output = self.run_program("\u00b2:00am-5:00pm\n9:00am-5:00pm\n")
        self.assertEqual(days, 1)
        self.assertIn("UNREADABLE TIME", output)
        self.assertIn("ROUNDED TIME:\t8.00 hours.", output)

    def test_trailing_comma_keeps_days_apart(self):
        days, output = self.run_program("9:00am-5:00pm,\n1:00pm-2:00pm\n")
        self.assertEqual(days, 2)
        self.assertIn("ROUNDED TIME:\t8.00 hours.", output)
        self.assertIn("ROUNDED TIME:\t1.00 hours.", output)
        self.assertNotIn("09 hours", output)

    def test_trailing_comma_at_end_of_input(self):
        days, output = self.run_program("9:00am-5:00pm,")
        self.assertEqual(days, 1)
        self.assertIn("ROUNDED TIME:\t8.00 hours.", output)

    def test_empty_input(self):
        days, output = self.run_program("")
        self.assertEqual(days, 0)
        self.assertIn("Welcome to PUNCHCARD!", output)


class TestCommandLine(unittest.TestCase):

    def tearDown(self):
        logger.remove()

    def test_cli_exits_cleanly(self):
        result = CliRunner().invoke(app, [], input="9:00am-5:00pm\n1:00pm-1:00pm\n")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("ROUNDED TIME:\t8.00 hours.", result.output)

    def test_interrupt_exits_cleanly(self):
        with mock.patch("punchcard.run_punchcard", side_effect=KeyboardInterrupt):
            result = CliRunner().invoke(app, [], input="9:00am-5:00pm\n")
        self.assertEqual(result.exit_code, 0)
        self.assertNotIn("Aborted", result.output)

    def test_undecodable_input_is_reported(self):
        result = CliRunner().invoke(app, [], input=b"\xff:00am-5:00pm\n9:00am-5:00pm\n")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("UNREADABLE TIME", result.output)
        self.assertIn("ROUNDED TIME:\t8.00 hours.", result.output)

    def test_log_level_filters_debug_records(self):
        stream = io.StringIO()
        with mock.patch("sys.stderr", stream):
            _setup_logging("WARNING")
            logger.debug("pair details")
            logger.warning("something odd")
        self.assertNotIn("pair details", stream.getvalue())
        self.assertIn("something odd", stream.getvalue())


if __name__ == '__main__':
    unittest.main(verbosity=2)

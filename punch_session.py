from dataclasses import dataclass

from loguru import logger

from punch_input import InputCursor, EndOfInput, DELIMITER_FOUND, NEWLINE_FOUND, END_OF_INPUT
from punch_processor import PunchProcessor, DaySummary

# Session outcomes
ALL_PAIRS_READ = 'all_pairs_read'
STOP_REQUESTED = 'stop_requested'
ABORT_REQUESTED = 'abort_requested'

WELCOME_BANNER = (
    "\nWelcome to PUNCHCARD! This program is meant to help you record your work hours\n"
    "as an employee. To get started, just enter your start time and end time, in the\n"
    "format HH:MMcc-HH:MMcc. For example, if you worked from noon to 3pm today, you'd\n"
    "enter 12:00pm-3:00pm. Separate several ranges worked on the same day with commas,\n"
    "like 9:00am-1:00pm, 2:00pm-4:30pm. You can quit the program by closing this\n"
    "window, pressing Ctrl + C, or entering a start time and end time that are\n"
    "identical (such as 1:00pm-1:00pm).\n"
)
PROMPT = "Enter your times:"


@dataclass(frozen=True)
class SessionResult:
    status: str
    summary: DaySummary = None
    pairs: int = 0
    end_of_input: bool = False


class DaySession:
    """
    Reads the comma separated start-end pairs for one day and totals them.
    Output lines go through `echo`; the running total lives only in run().
    """

    def __init__(self, cursor, echo, processor=None):
        self.cursor = cursor
        self.echo = echo
        self.processor = processor or PunchProcessor()

    def run(self):
        """
        Process pairs until the end of the line.
        Returns a SessionResult; raises EndOfInput if the stream ends mid-entry.
        """
        summary = DaySummary()
        pairs = 0

        while True:
            start = self.processor.scan_time(self.cursor)
            if not start.ok:
                return self._abort(start, 'start')

            if self.cursor.scan_to('-') == NEWLINE_FOUND:
                self.echo('[ERROR]\tMISSING END TIME: expected "-" after the start time.')
                self.echo("Something was wrong with your given end time!")
                logger.debug(f"No end time after '{start.raw_text}'")
                return SessionResult(ABORT_REQUESTED)

            end = self.processor.scan_time(self.cursor)
            if not end.ok:
                return self._abort(end, 'end')

            # Print the times read back for confirmation
            self.echo("")
            self.echo(f"START:\t{self.processor.format_clock_time(start.clock)}")
            self.echo(f"END:\t{self.processor.format_clock_time(end.clock)}")

            if start.clock == end.clock:
                logger.info(f"Stop requested with {start.raw_text}-{end.raw_text}")
                return SessionResult(STOP_REQUESTED, summary=summary, pairs=pairs)

            duration = self.processor.calculate_duration(
                self.processor.time_to_minutes(start.clock),
                self.processor.time_to_minutes(end.clock)
            )
            self.echo(f"ACTUAL TIME:\t{self.processor.format_duration(duration.hours, duration.minutes)}.")

            summary = summary.add(duration)
            pairs += 1
            logger.debug(f"Pair {pairs}: {duration.total_minutes} mins, day total {summary}")

            found = self.cursor.scan_to(',')
            if found == DELIMITER_FOUND:
                # A trailing comma still ends the day at the line break
                self.cursor.skip_whitespace(newlines=False)
                if self.cursor.peek() == '\n':
                    self.cursor.read()
                    found = NEWLINE_FOUND
                elif self.cursor.at_end():
                    found = END_OF_INPUT
                else:
                    continue
            return SessionResult(ALL_PAIRS_READ, summary=summary, pairs=pairs,
                                 end_of_input=(found == END_OF_INPUT))

    def _abort(self, outcome, which):
        for line in outcome.messages():
            self.echo(line)
        self.echo(f"Something was wrong with your given {which} time!")
        self.cursor.discard_line()
        return SessionResult(ABORT_REQUESTED)


def report_day(result, echo, processor):
    """Print the actual and rounded totals for a finished day"""
    summary = result.summary
    rounded = processor.round_time(summary.hours, summary.minutes)

    echo(f"TOTAL ACTUAL TIME:\t{processor.format_duration(summary.hours, summary.minutes)} "
         f"({processor.format_decimal_hours(summary.hours, summary.minutes)}).")
    echo(f"ROUNDED TIME:\t{processor.format_decimal_hours(rounded.hours, rounded.minutes)}.")
    echo("")
    logger.info(f"Day of {result.pairs} pair(s): {summary.hours}h {summary.minutes}m, "
                f"rounded {processor.to_decimal_hours(rounded.hours, rounded.minutes):0.2f}h")


def run_punchcard(stream, echo, processor=None):
    """
    Main loop: one day session per line until the stop pair or end of input.
    Returns the number of days reported.
    """
    processor = processor or PunchProcessor()
    cursor = stream if isinstance(stream, InputCursor) else InputCursor(stream)
    days = 0

    echo(WELCOME_BANNER)

    while True:
        echo(PROMPT)
        try:
            result = DaySession(cursor, echo, processor).run()
        except EndOfInput:
            logger.debug("End of input, stopping")
            break

        if result.status == STOP_REQUESTED:
            break
        if result.status == ABORT_REQUESTED:
            # Discard the whole day and ask again
            continue

        report_day(result, echo, processor)
        days += 1

        if result.end_of_input:
            break

    return days

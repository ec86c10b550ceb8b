from dataclasses import dataclass

from loguru import logger

from punch_input import InputCursor, EndOfInput

# Rounding Configuration
ROUNDING_RULES = {
    'increment': 15,  # mins - payroll rounds to the quarter hour
    'bias': 7,        # mins - 0-7 rounds down, 8 and up rounds up
}

# Clock Limits (12-hour clock)
CLOCK_LIMITS = {
    'min_hour': 1,
    'max_hour': 12,
    'min_minute': 0,
    'max_minute': 59,
}

MERIDIEMS = ('a', 'p')

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * 60
NOON = 12 * 60

# Validation failures reported by the time parser
HOUR_TOO_SMALL = 'hour_too_small'
HOUR_TOO_BIG = 'hour_too_big'
MINUTE_TOO_SMALL = 'minute_too_small'
MINUTE_TOO_BIG = 'minute_too_big'
UNRECOGNIZED_MERIDIEM = 'unrecognized_meridiem'
UNREADABLE_TIME = 'unreadable_time'


@dataclass(frozen=True)
class ClockTime:
    hour: int
    minute: int
    meridiem: str  # 'a' or 'p'


@dataclass(frozen=True)
class Duration:
    hours: int = 0
    minutes: int = 0

    @property
    def total_minutes(self):
        return self.hours * MINUTES_PER_HOUR + self.minutes


@dataclass(frozen=True)
class DaySummary:
    """Running total of time worked for one day, replaced on every pair"""
    hours: int = 0
    minutes: int = 0

    def add(self, duration):
        minutes = self.minutes + duration.minutes
        hours = self.hours + duration.hours + minutes // MINUTES_PER_HOUR
        return DaySummary(hours=hours, minutes=minutes % MINUTES_PER_HOUR)


@dataclass(frozen=True)
class ParseOutcome:
    """
    Result of reading one time token.
    On success `clock` is set and `violations` is empty; otherwise `violations`
    lists every check that failed, in the order they are reported.
    """
    clock: ClockTime = None
    violations: tuple = ()
    raw_text: str = ''
    raw_hour: int = None
    raw_minute: int = None
    raw_meridiem: str = ''

    @property
    def ok(self):
        return self.clock is not None

    def messages(self):
        """Diagnostic lines naming each failed check and the offending value"""
        lines = []
        for violation in self.violations:
            if violation == HOUR_TOO_SMALL:
                lines.append(f'[ERROR]\tHOUR TOO SMALL: "{self.raw_hour}", should be greater than 0.')
            elif violation == HOUR_TOO_BIG:
                lines.append(f'[ERROR]\tHOUR TOO BIG: "{self.raw_hour}", should be less than 13.')
            elif violation == MINUTE_TOO_SMALL:
                lines.append(f'[ERROR]\tMINUTE TOO SMALL: "{self.raw_minute}", should be greater than -1.')
            elif violation == MINUTE_TOO_BIG:
                lines.append(f'[ERROR]\tMINUTE TOO BIG: "{self.raw_minute}", should be less than 60.')
            elif violation == UNRECOGNIZED_MERIDIEM:
                shown = f'{self.raw_meridiem}m' if self.raw_meridiem else ''
                lines.append(f'[ERROR]\tUNRECOGNIZED MERIDIEM: "{shown}", should be "am" or "pm".')
            elif violation == UNREADABLE_TIME:
                lines.append(f'[ERROR]\tUNREADABLE TIME: "{self.raw_text}", should look like HH:MMam or HH:MMpm.')
        return lines


class PunchProcessor:
    def __init__(self):
        self.rounding_rules = dict(ROUNDING_RULES)

    # ------------------------ Parsing ------------------------
    def parse_time(self, time_str):
        """Parse a single time such as '9:05am' or ' 12:30 P'"""
        return self.scan_time(InputCursor(time_str))

    def scan_time(self, cursor):
        """
        Read one time token from the cursor in the form H[H]:MM followed by a
        meridiem letter. Only the first letter of 'am'/'pm' is consumed; the
        caller skips whatever trails it.
        Raises EndOfInput if the stream runs out before the token is complete.
        """
        cursor.skip_whitespace()
        if cursor.at_end():
            raise EndOfInput()

        raw = ''
        hour = cursor.read_integer()
        if hour is None:
            return self._unreadable(raw + cursor.peek())
        raw += str(hour)

        cursor.skip_whitespace(newlines=False)
        if cursor.at_end():
            raise EndOfInput()
        if cursor.peek() != ':':
            return self._unreadable(raw + cursor.peek(), hour=hour)
        raw += cursor.read()

        cursor.skip_whitespace(newlines=False)
        if cursor.at_end():
            raise EndOfInput()
        minute = cursor.read_integer()
        if minute is None:
            return self._unreadable(raw + cursor.peek(), hour=hour)
        raw += f'{minute:02d}' if minute >= 0 else str(minute)

        cursor.skip_whitespace(newlines=False)
        if cursor.at_end():
            raise EndOfInput()
        meridiem = ''
        if cursor.peek() != '\n':
            # Lowercase so 'A'/'P' are accepted
            meridiem = cursor.read().lower()
        raw += meridiem

        return self.validate_time(hour, minute, meridiem, raw)

    def validate_time(self, hour, minute, meridiem, raw_text=''):
        """Check every clock limit independently and collect all failures"""
        violations = []
        if hour < CLOCK_LIMITS['min_hour']:
            violations.append(HOUR_TOO_SMALL)
        if hour > CLOCK_LIMITS['max_hour']:
            violations.append(HOUR_TOO_BIG)
        if minute < CLOCK_LIMITS['min_minute']:
            violations.append(MINUTE_TOO_SMALL)
        if minute > CLOCK_LIMITS['max_minute']:
            violations.append(MINUTE_TOO_BIG)
        if meridiem not in MERIDIEMS:
            violations.append(UNRECOGNIZED_MERIDIEM)

        if violations:
            logger.debug(f"Rejected time '{raw_text}': {', '.join(violations)}")
            return ParseOutcome(violations=tuple(violations), raw_text=raw_text,
                                raw_hour=hour, raw_minute=minute, raw_meridiem=meridiem)

        return ParseOutcome(clock=ClockTime(hour, minute, meridiem), raw_text=raw_text,
                            raw_hour=hour, raw_minute=minute, raw_meridiem=meridiem)

    def _unreadable(self, raw_text, hour=None):
        logger.debug(f"Could not read a time from '{raw_text}'")
        return ParseOutcome(violations=(UNREADABLE_TIME,), raw_text=raw_text.strip(), raw_hour=hour)

    # ------------------------ Time Utilities ------------------------
    def time_to_minutes(self, clock):
        """Convert a 12-hour ClockTime to minutes since midnight (0-1439)"""
        if clock.hour == 12:
            base = 0 if clock.meridiem == 'a' else NOON
        else:
            base = clock.hour * MINUTES_PER_HOUR
            if clock.meridiem == 'p':
                base += NOON
        return base + clock.minute

    def calculate_duration(self, start_minutes, end_minutes):
        """
        Calculate the time between start and end (minutes since midnight).
        An end earlier than the start is taken to be on the following day.
        """
        elapsed = end_minutes - start_minutes
        if elapsed < 0:
            elapsed += MINUTES_PER_DAY
        return Duration(hours=elapsed // MINUTES_PER_HOUR, minutes=elapsed % MINUTES_PER_HOUR)

    def round_time(self, hours, minutes):
        """Round to the nearest quarter hour, carrying a full hour when needed"""
        increment = self.rounding_rules['increment']
        bias = self.rounding_rules['bias']

        rounded = ((minutes + bias) // increment) * increment
        if rounded == MINUTES_PER_HOUR:
            rounded = 0
            hours += 1
        return Duration(hours=hours, minutes=rounded)

    def to_decimal_hours(self, hours, minutes):
        """Convert hours and minutes to decimal hours"""
        return hours + minutes / MINUTES_PER_HOUR

    # ------------------------ Formatting ------------------------
    def format_clock_time(self, clock):
        return f"{clock.hour:02d}:{clock.minute:02d}{clock.meridiem}m"

    def format_duration(self, hours, minutes):
        return f"{hours:02d} hours and {minutes:02d} minutes"

    def format_decimal_hours(self, hours, minutes):
        return f"{self.to_decimal_hours(hours, minutes):0.2f} hours"

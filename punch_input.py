import io
import string

# Results of InputCursor.scan_to
DELIMITER_FOUND = 'delimiter'
NEWLINE_FOUND = 'newline'
END_OF_INPUT = 'end_of_input'

DIGITS = string.digits
BLANKS = ' \t\r\f\v'


class EndOfInput(Exception):
    """Raised when a time is needed but the input stream has run out"""


class InputCursor:
    """
    Character cursor over a text stream with one character of look-ahead.
    Reads block until the stream has data, like the terminal it wraps.
    """

    def __init__(self, stream):
        if isinstance(stream, str):
            stream = io.StringIO(stream)
        self.stream = stream
        self._pending = None

    def peek(self):
        """Return the next character without consuming it ('' at end of input)"""
        if self._pending is None:
            self._pending = self.stream.read(1)
        return self._pending

    def read(self):
        """Consume and return the next character ('' at end of input)"""
        char = self.peek()
        self._pending = None
        return char

    def at_end(self):
        return self.peek() == ''

    def skip_whitespace(self, newlines=True):
        skipped = BLANKS + '\n' if newlines else BLANKS
        while self.peek() != '' and self.peek() in skipped:
            self.read()

    def read_integer(self):
        """
        Read an optionally signed decimal integer.
        Returns None (consuming nothing but a sign) if no digits follow.
        """
        sign = ''
        if self.peek() in ('-', '+'):
            sign = self.read()

        digits = ''
        while self.peek() != '' and self.peek() in DIGITS:
            digits += self.read()

        if not digits:
            return None
        return int(sign + digits)

    def scan_to(self, delimiter):
        """
        Advance past the next delimiter or newline, whichever comes first.
        Returns DELIMITER_FOUND, NEWLINE_FOUND or END_OF_INPUT.
        """
        while True:
            char = self.read()
            if char == '':
                return END_OF_INPUT
            if char == delimiter:
                return DELIMITER_FOUND
            if char == '\n':
                return NEWLINE_FOUND

    def discard_line(self):
        """Throw away everything up to and including the end of the current line"""
        return self.scan_to('\n')

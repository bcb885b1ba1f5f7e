"""Vote payload parser.

Turns decrypted plaintext into a VoteRecord. The plaintext is a
newline-delimited sequence:

    <opening-token>\\n
    <service_name>\\n
    <username>\\n
    <address>\\n
    <timestamp>\\n

The opening token is compared byte-exactly before any field is read.
A block decrypted with the wrong key produces garbage that will not
match, so this check also catches key mismatches that slipped past the
padding check.

Field contents are free-form strings. The parser does not check the
shape of the address or the timestamp; that is up to listeners.
"""

from __future__ import annotations

from votifier.domain.errors.vote import MalformedVoteError
from votifier.domain.models.vote import VoteRecord

DEFAULT_OPENING_TOKEN = "VOTIFIER"

# Opening token plus four fields
REQUIRED_LINES = 5

_FIELD_NAMES = ("service_name", "username", "address", "timestamp")


class VoteParser:
    """Parses vote plaintext into VoteRecord instances.

    The parser is stateless after construction and safe to share between
    concurrent connection handlers.

    Example:
        >>> parser = VoteParser()
        >>> parser.parse(b"VOTIFIER\\nExampleService\\nalice\\n203.0.113.5\\n1700000000\\n")
        VoteRecord(service_name='ExampleService', username='alice', address='203.0.113.5', timestamp='1700000000')
    """

    def __init__(self, opening_token: str = DEFAULT_OPENING_TOKEN) -> None:
        """Initialize the parser.

        Args:
            opening_token: Literal that must be the first line of every
                payload. Must be non-empty and contain no newline.
        """
        if not opening_token or "\n" in opening_token:
            raise ValueError("opening_token must be a non-empty single line")
        self._opening_token = opening_token.encode("utf-8")

    @property
    def opening_token(self) -> str:
        """The literal expected on the first line."""
        return self._opening_token.decode("utf-8")

    def parse(self, plaintext: bytes) -> VoteRecord:
        """Parse decrypted plaintext into a VoteRecord.

        Args:
            plaintext: The decrypted payload bytes.

        Returns:
            The decoded VoteRecord.

        Raises:
            MalformedVoteError: If the opening token does not match, fewer
                than five lines are present, a field is empty or
                whitespace-only, or a field is not valid UTF-8.
        """
        lines = plaintext.split(b"\n")

        if lines[0] != self._opening_token:
            raise MalformedVoteError("opening token mismatch")

        if len(lines) < REQUIRED_LINES:
            raise MalformedVoteError(
                f"expected at least {REQUIRED_LINES} lines, got {len(lines)}"
            )

        fields: dict[str, str] = {}
        for name, raw in zip(_FIELD_NAMES, lines[1:REQUIRED_LINES]):
            try:
                value = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedVoteError(f"{name} is not valid UTF-8") from e
            if not value.strip():
                raise MalformedVoteError(f"{name} is empty")
            fields[name] = value

        # Trailing lines past the timestamp are ignored
        return VoteRecord(**fields)

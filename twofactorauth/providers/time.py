"""
Time sources and multi-source clock validation.

TOTP codes are only as good as the clock they are computed against; callers
can compare the local clock with one or more remote sources before trusting
it (see ensure_correct_time()).
"""

from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Iterable, Protocol
import logging
import time

import requests

from ..exceptions import TimeDriftError, TimeException
from ..otp_core import DEFAULT_LENIENCY

logger = logging.getLogger(__name__)

USER_AGENT = "twofactorauth HttpTimeProvider"


class TimeProviderProtocol(Protocol):
    def get_time(self) -> int: ...


class LocalMachineTimeProvider:
    """Wall clock of the machine running the code."""

    def get_time(self) -> int:
        return int(time.time())


class HttpTimeProvider:
    """
    Takes the time from any web server by doing a HEAD request on the URL and
    reading the 'Date:' response header. Redirects are not followed.
    """

    def __init__(self, url: str = "https://google.com", timeout: float = 5.0):
        self.url = url
        self.timeout = timeout

    def get_time(self) -> int:
        try:
            resp = requests.head(
                self.url,
                allow_redirects=False,
                timeout=self.timeout,
                headers={"Connection": "close", "User-Agent": USER_AGENT},
            )
        except requests.RequestException as e:
            raise TimeException(f"Unable to retrieve time from {self.url} ({e})") from e

        date_header = resp.headers.get("Date")
        if not date_header:
            raise TimeException(
                f'Unable to retrieve time from {self.url} (Invalid or no "Date:" header found)'
            )
        try:
            parsed = parsedate_to_datetime(date_header)
            if parsed.tzinfo is None:
                # "-0000" zone: UTC, not local time
                parsed = parsed.replace(tzinfo=timezone.utc)
            timestamp = int(parsed.timestamp())
        except (TypeError, ValueError) as e:
            raise TimeException(
                f'Unable to retrieve time from {self.url} (Invalid or no "Date:" header found)'
            ) from e
        logger.debug("Time from %s: %s", self.url, timestamp)
        return timestamp


def ensure_correct_time(
    reference: TimeProviderProtocol,
    sources: Iterable[TimeProviderProtocol],
    leniency: int = DEFAULT_LENIENCY,
) -> None:
    """
    Compare every source against the reference clock.

    Arguments:
        reference: the clock codes are computed with
        sources: secondary time sources
        leniency: allowed difference in seconds

    Raises:
        TimeDriftError: if any source differs by more than leniency
        TimeException: propagated unchanged from a failing source
    """
    reference_time = reference.get_time()
    for source in sources:
        source_time = source.get_time()
        drift = abs(source_time - reference_time)
        if drift > leniency:
            logger.warning(
                "Time drift of %ss against %s exceeds leniency of %ss",
                drift, type(source).__name__, leniency,
            )
            raise TimeDriftError(
                f"Time for timeprovider is off by more than {leniency} seconds "
                f"when compared to {type(source).__name__}"
            )

"""
YouTube channel lookup for video links.
"""

import logging
import re
from typing import Optional, Protocol

import requests

from autoshadow.core.exceptions import ErrorCode, FetchError
from autoshadow.domains import DomainMatcher
from autoshadow.utils import api_retry

YOUTUBE_DOMAINS = DomainMatcher.build(["youtube.com", "youtu.be"])

_CHANNEL_ID_RE = re.compile(r'<meta\s+itemprop="channelId"\s+content="([^"]+)"')


def is_youtube_url(url: str) -> bool:
    return YOUTUBE_DOMAINS.contains(url)


class ChannelResolver(Protocol):
    """Maps a video URL to the id of the channel that published it."""

    def resolve(self, url: str) -> Optional[str]:
        """
        Return the channel id, or None if the page has none.

        Raises:
            FetchError: If the page could not be fetched
        """
        ...


class YoutubeChannelResolver:
    """Resolves channel ids by scraping the video page's channelId meta tag."""

    def __init__(self, timeout: float = 10.0, user_agent: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers['User-Agent'] = user_agent
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def resolve(self, url: str) -> Optional[str]:
        try:
            html = self._fetch(url)
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FetchError(
                f"Video page request failed: {e}",
                error_code=ErrorCode.FETCH_INVALID_RESPONSE,
                url=url,
                status_code=status,
                cause=e,
            )
        except requests.exceptions.Timeout as e:
            raise FetchError(f"Timed out fetching {url}", error_code=ErrorCode.FETCH_TIMEOUT, url=url, cause=e)
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Failed to fetch {url}: {e}", url=url, cause=e)

        match = _CHANNEL_ID_RE.search(html)
        if match is None:
            self.logger.debug(f"No channelId meta tag found at {url}")
            return None
        return match.group(1)

    @api_retry(max_retries=2, initial_delay=1.0)
    def _fetch(self, url: str) -> str:
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.text

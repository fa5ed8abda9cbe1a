# src/matchtv/tvmatchen_scraper.py

import requests
from bs4 import BeautifulSoup
import re
import logging

from .schedule_config import (
    DAY_ID_PREFIX,
    DAYS_TO_SHOW,
    FETCH_TIMEOUT,
    LEAGUES,
    TVMATCHEN_URL,
    USER_AGENT,
)
from .schedule_models import Match, Schedule

logger = logging.getLogger(__name__)

MULTIPLE_SPACES = re.compile(r'\s+')


class ScheduleError(Exception):
    """Base class for failures that abort a schedule refresh."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class FetchError(ScheduleError):
    """The schedule page could not be downloaded."""


class ParseError(ScheduleError):
    """The downloaded page holds no usable markup."""


def fetch_schedule_page(url: str = TVMATCHEN_URL, timeout: float = FETCH_TIMEOUT) -> BeautifulSoup:
    """Fetches the schedule page and returns the parsed document.

    Raises FetchError on transport failures and non-2xx responses, and
    ParseError when the body contains no HTML elements at all.
    """
    headers = {'User-Agent': USER_AGENT}
    try:
        response = requests.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise FetchError(f"Error fetching {url}: {e}", url=url) from e

    try:
        soup = BeautifulSoup(response.text, 'html.parser')
    except Exception as e:
        raise ParseError(f"Could not parse response from {url}: {e}", url=url) from e

    if soup.find() is None:
        raise ParseError(f"No HTML markup in response from {url}", url=url)

    logger.info(f"Successfully fetched {url}")
    return soup


def _joined_text(elements) -> str:
    return "".join(el.get_text() for el in elements)


def extract_days(soup: BeautifulSoup, max_days: int = DAYS_TO_SHOW) -> list[tuple[str, list[dict]]]:
    """
    Walks the page and returns (day_id, rows) pairs in page order.

    Each row is a dict of raw fields: name, league_text, link_texts, channel
    and time. League text is left untouched, see normalize_league().
    """
    headings = soup.select('h2.day-name')
    if not headings:
        logger.warning("No day headings found (h2.day-name). Check page structure.")

    days = []
    for heading in headings[:max_days]:
        day_span = heading.select_one('span.day-name-inner')
        day_id = day_span.get('id', '') if day_span else ''
        day_id = day_id.replace(DAY_ID_PREFIX, '')

        rows = []
        # The match table is the element right after the heading
        match_table = heading.find_next_sibling()
        if match_table is None:
            logger.debug(f"No match table after day heading {day_id!r}")
            days.append((day_id, rows))
            continue

        for row in match_table.select('.sport-name-fotboll'):
            leagues = row.select('.league')
            channel_item = row.select_one('.channel .channel-item')
            rows.append({
                'name': _joined_text(row.select('.match-name')).strip(),
                'league_text': _joined_text(leagues),
                'link_texts': [a.get_text() for league in leagues for a in league.find_all('a')],
                'channel': (channel_item.get('title', '') if channel_item else '').strip(),
                'time': _joined_text(row.select('.time .field-content')).strip(),
            })

        days.append((day_id, rows))

    return days


def normalize_league(raw_text: str, link_texts) -> str:
    """Strips embedded link texts and collapses whitespace in a league label."""
    league = raw_text
    for link_text in link_texts:
        if link_text:
            league = league.replace(link_text, '')

    league = league.replace('\n', ' ')
    league = MULTIPLE_SPACES.sub(' ', league)
    return league.strip(' ')


def is_interesting(league: str, leagues=LEAGUES) -> bool:
    """True if the league label contains one of the followed leagues."""
    return any(name in league for name in leagues)


def parse_schedule(soup: BeautifulSoup, max_days: int = DAYS_TO_SHOW, leagues=LEAGUES) -> Schedule:
    """Builds a Schedule of followed-league matches from a parsed page."""
    schedule = {}
    for day_id, rows in extract_days(soup, max_days):
        matches = []
        for row in rows:
            league = normalize_league(row['league_text'], row['link_texts'])
            if not is_interesting(league, leagues):
                continue

            matches.append(Match(
                name=row['name'],
                league=league,
                channel=row['channel'],
                time=row['time'],
            ))

        schedule[day_id] = tuple(matches)

    return schedule


def scrape_schedule(url: str = TVMATCHEN_URL, timeout: float = FETCH_TIMEOUT) -> Schedule:
    """Fetches and parses the schedule. FetchError/ParseError propagate."""
    soup = fetch_schedule_page(url, timeout=timeout)
    try:
        schedule = parse_schedule(soup)
    except Exception as e:
        raise ParseError(f"Could not extract schedule from {url}: {e}", url=url) from e

    total = sum(len(matches) for matches in schedule.values())
    logger.info(f"Parsed {total} matches over {len(schedule)} days.")
    return schedule

"""
Click bookkeeping for smart links.

Scanners and link previewers often hit a redirect several times within a
few seconds, so analytics count one click per visit: for each smart link
and user agent, clicks no further apart than SESSION_WINDOW from the first
click of the visit form one session and only the last of them is kept.
Raw click rows are never removed.
"""
import logging
import re
from collections import defaultdict
from datetime import timedelta

from django.utils import timezone

from .models import SmartLinkClick

logger = logging.getLogger(__name__)

SESSION_WINDOW = timedelta(seconds=45)
DEFAULT_RANGE_DAYS = 30

_RANGE_PATTERN = re.compile(r'^(\d+)d$')


def record_click(destination, user_agent=None, referrer=None) -> SmartLinkClick:
    click = SmartLinkClick.objects.create(
        smart_link_id=destination.smart_link_id,
        service_key=destination.service_key,
        user_agent=user_agent or None,
        referrer=referrer or None,
    )
    logger.info(f"Smart link {destination.smart_link_id}: click on {destination.service_key}")
    return click


def filter_human_clicks(clicks):
    """
    Keep the last click of every session, preserving the input order.

    Works on anything exposing smart_link_id, user_agent and created_at.
    """
    groups = defaultdict(list)
    for click in clicks:
        groups[(click.smart_link_id, (click.user_agent or '').strip())].append(click)

    kept = set()
    for group in groups.values():
        session = []
        for click in sorted(group, key=lambda c: c.created_at):
            if session and click.created_at - session[0].created_at > SESSION_WINDOW:
                kept.add(id(session[-1]))
                session = []
            session.append(click)
        if session:
            kept.add(id(session[-1]))

    return [click for click in clicks if id(click) in kept]


def resolve_range(value, now=None):
    """
    Parse an analytics range such as '7d' or 'all' into (start, end, label).

    Unrecognised values fall back to the last 30 days; 'all' has no start.
    """
    now = now or timezone.now()
    value = value or f'{DEFAULT_RANGE_DAYS}d'
    if value == 'all':
        return None, now, 'all'

    match = _RANGE_PATTERN.match(value)
    days = int(match.group(1)) if match else DEFAULT_RANGE_DAYS
    return now - timedelta(days=days), now, f'{days}d'


def click_summary(smart_link, range_value=None, human_only=True, now=None) -> dict:
    """Click totals for one smart link, by service and by day."""
    start, end, label = resolve_range(range_value, now)

    clicks = smart_link.clicks.filter(created_at__lte=end)
    if start is not None:
        clicks = clicks.filter(created_at__gte=start)
    clicks = list(clicks.order_by('created_at', 'id'))
    if human_only:
        clicks = filter_human_clicks(clicks)

    by_service = defaultdict(int)
    by_date = defaultdict(int)
    for click in clicks:
        by_service[click.service_key] += 1
        by_date[timezone.localdate(click.created_at).isoformat()] += 1

    return {
        'smartLinkId': smart_link.id,
        'songId': smart_link.song_id,
        'range': label,
        'humanOnly': human_only,
        'totalClicks': len(clicks),
        'clicksByService': dict(by_service),
        'clicksByDate': [{'date': day, 'clicks': by_date[day]} for day in sorted(by_date)],
    }

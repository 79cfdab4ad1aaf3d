"""
Spotify Web API client for catalog search.

Uses the client credentials flow for an app-only access token, cached in
the Django cache until shortly before it expires, and looks tracks up by
ISRC.
"""

import logging
import requests
from typing import Dict, Optional
from django.conf import settings
from django.core.cache import cache


logger = logging.getLogger(__name__)

TOKEN_URL = 'https://accounts.spotify.com/api/token'
SEARCH_URL = 'https://api.spotify.com/v1/search'
TOKEN_CACHE_KEY = 'spotify:client_credentials_token'

# Refresh this many seconds before Spotify's expiry
TOKEN_EXPIRY_MARGIN = 30


class SpotifyConfigurationError(Exception):
    """Raised when Spotify credentials are not configured."""


class SpotifyClient:
    """
    Minimal Spotify client for server-side ISRC lookups.
    """

    def __init__(self, client_id: Optional[str] = None, client_secret: Optional[str] = None):
        self.client_id = client_id or getattr(settings, 'SPOTIFY_CLIENT_ID', '')
        self.client_secret = client_secret or getattr(settings, 'SPOTIFY_CLIENT_SECRET', '')
        self.timeout = 10

    def get_access_token(self) -> str:
        token = cache.get(TOKEN_CACHE_KEY)
        if token:
            return token

        if not self.client_id or not self.client_secret:
            raise SpotifyConfigurationError(
                'Missing SPOTIFY_CLIENT_ID or SPOTIFY_CLIENT_SECRET settings.'
            )

        response = requests.post(
            TOKEN_URL,
            data={'grant_type': 'client_credentials'},
            auth=(self.client_id, self.client_secret),
            timeout=self.timeout
        )
        if not response.ok:
            raise requests.HTTPError(
                f"Failed to obtain Spotify access token: {response.status_code} {response.text}",
                response=response
            )

        data = response.json()
        expires_in = data.get('expires_in') or 3600
        cache.set(TOKEN_CACHE_KEY, data['access_token'], max(expires_in - TOKEN_EXPIRY_MARGIN, 1))
        logger.debug("Fetched new Spotify access token")
        return data['access_token']

    def search_track_by_isrc(self, isrc: str) -> Optional[Dict]:
        """
        Return the best matching track for an ISRC, or None when nothing matches.

        The match is a dict with id, url, name, artists and imageUrl.
        """
        compact = (isrc or '').strip().replace('-', '')
        if not compact:
            return None

        token = self.get_access_token()
        response = requests.get(
            SEARCH_URL,
            params={'type': 'track', 'limit': 5, 'q': f'isrc:{compact}'},
            headers={'Authorization': f'Bearer {token}'},
            timeout=self.timeout
        )
        if not response.ok:
            logger.error(f"Spotify search error for ISRC {compact}: {response.status_code} {response.text}")
            return None

        items = (response.json().get('tracks') or {}).get('items') or []
        if not items or not items[0].get('id'):
            return None

        best = items[0]
        images = (best.get('album') or {}).get('images') or []
        return {
            'id': best['id'],
            'url': f"https://open.spotify.com/track/{best['id']}",
            'name': best.get('name') or '',
            'artists': [artist['name'] for artist in best.get('artists') or [] if artist.get('name')],
            'imageUrl': images[0].get('url') if images else None,
        }

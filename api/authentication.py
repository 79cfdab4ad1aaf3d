"""
Session-cookie authentication for the JSON API.
"""
from rest_framework.authentication import SessionAuthentication


class SessionCookieAuthentication(SessionAuthentication):
    """
    Django session authentication that challenges unauthenticated callers.

    DRF only answers 401 when the first authentication class returns a
    WWW-Authenticate value; plain SessionAuthentication returns none, which
    turns every missing session into a 403.
    """

    def authenticate_header(self, request):
        return 'Session'

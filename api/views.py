from django.http import JsonResponse
from django.views.decorators.http import require_http_methods
from django.views.decorators.csrf import ensure_csrf_cookie
from django.middleware.csrf import get_token
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from .permissions import is_admin
from .serializers import UserSerializer


@require_http_methods(["GET"])
@ensure_csrf_cookie
def auth_status(request):
    """
    Returns the current authentication status and user info with profile.
    Also sets CSRF cookie for the frontend.
    """
    if not request.user.is_authenticated:
        return JsonResponse({
            'authenticated': False,
            'user': None,
            'csrf_token': get_token(request)
        })

    profile = getattr(request.user, 'profile', None)
    return JsonResponse({
        'authenticated': True,
        'user': {
            'id': request.user.id,
            'email': request.user.email,
            'first_name': request.user.first_name,
            'last_name': request.user.last_name,
            'role': profile.role if profile else None,
            'is_admin': is_admin(request.user),
            'collaborator_id': profile.collaborator_id if profile else None,
        },
        'csrf_token': get_token(request)
    })


class CurrentUserView(APIView):
    """
    Get current user profile.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        """Get current user with profile information."""
        serializer = UserSerializer(request.user)
        return Response(serializer.data)

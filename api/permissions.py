"""
Permission classes for API endpoints.

- IsAdministrator: back-office admins and Django superusers.
- IsAdministratorOrReadOnly: anyone authenticated may read, admins may write.
- CanAccessSong: object-level check for Song instances (admins see all,
  collaborators only the songs they are credited on).
"""
from rest_framework import permissions


def is_admin(user):
    """Return True if the user is a superuser or has the admin profile role."""
    if not user or not user.is_authenticated:
        return False
    if getattr(user, 'is_superuser', False):
        return True
    profile = getattr(user, 'profile', None)
    return bool(profile and profile.is_admin)


def get_collaborator_id(user):
    """Return the Collaborator id the user signs in as, if any."""
    profile = getattr(user, 'profile', None)
    if profile is None:
        return None
    return profile.collaborator_id


def can_access_song(user, song):
    """
    Admins can access every song; collaborators only songs they are on.
    """
    if is_admin(user):
        return True
    collaborator_id = get_collaborator_id(user)
    if not collaborator_id:
        return False
    return song.song_collaborators.filter(collaborator_id=collaborator_id).exists()


class IsAdministrator(permissions.BasePermission):
    """
    Permission to check if user is a back-office administrator.
    """
    message = 'Forbidden: Only admins can perform this action'

    def has_permission(self, request, view):
        return is_admin(request.user)


class IsAdministratorOrReadOnly(permissions.BasePermission):
    """
    Read access for any authenticated user, write access for administrators.
    """
    message = 'Forbidden: Only admins can modify this resource'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_admin(request.user)


class CanAccessSong(permissions.BasePermission):
    """
    Object-level permission for Song instances.
    """
    message = "Forbidden: You don't have access to this song"

    def has_object_permission(self, request, view, obj):
        return can_access_song(request.user, obj)

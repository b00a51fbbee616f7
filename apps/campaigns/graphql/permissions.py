from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication
from strawberry.permission import BasePermission


class IsAuthenticated(BasePermission):
    """Same bearer token the REST API takes; a logged-in admin session also passes."""

    message = "Authentication credentials were not provided or are invalid"

    def has_permission(self, source, info, **kwargs):
        request = info.context.request
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            return True
        try:
            authenticated = JWTAuthentication().authenticate(request)
        except AuthenticationFailed:
            return False
        if authenticated is None:
            return False
        request.user = authenticated[0]
        return True

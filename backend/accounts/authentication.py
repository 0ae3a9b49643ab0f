# accounts/authentication.py
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed


class ActiveUserJWTAuthentication(JWTAuthentication):
    """
    Bearer JWT authentication that also rejects soft-deleted users.

    simplejwt already rejects users with is_active=False; a user restored
    through the plain activate endpoint keeps is_deleted=True and must stay
    locked out until an admin restores them.
    """

    def get_user(self, validated_token):
        user = super().get_user(validated_token)
        if getattr(user, "is_deleted", False):
            raise AuthenticationFailed("User is deleted", code="user_deleted")
        return user

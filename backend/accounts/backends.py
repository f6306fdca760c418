"""
Custom authentication backend for multi-field login.

Allows officers to authenticate using any one of:
``email``, ``badge_number`` or ``username`` together with their
``password``.

This backend is registered in ``settings.AUTHENTICATION_BACKENDS``
so that Django's ``authenticate()`` call dispatches to it.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.db.models import Q

User = get_user_model()


class BadgeOrEmailAuthBackend(ModelBackend):
    """
    Authenticate against email (case-insensitive), badge number or username.

    When ``django.contrib.auth.authenticate(identifier=..., password=...)``
    is called, this backend resolves the user from the ``identifier``
    keyword argument.
    """

    def authenticate(self, request, identifier=None, password=None, **kwargs):
        if identifier is None:
            identifier = kwargs.get(User.USERNAME_FIELD)
        if identifier is None or password is None:
            return None

        identifier = identifier.strip()
        try:
            user = User.objects.select_related("rank").get(
                Q(email__iexact=identifier)
                | Q(badge_number=identifier)
                | Q(username=identifier)
            )
        except User.DoesNotExist:
            # Run the default password hasher to mitigate timing attacks
            User().set_password(password)
            return None
        except User.MultipleObjectsReturned:
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None

"""
Who is performing an action.

Admin operations can be triggered either by a logged-in user with the admin
role or by the platform itself (management commands, scheduled jobs), which
has no user record behind it. Services take an ``Actor`` instead of a
nullable user so that code never dereferences a missing admin.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class RealUser:
    user: object

    @property
    def is_admin(self):
        return self.user.is_admin

    @property
    def user_id(self):
        return self.user.pk

    @property
    def record(self):
        """User row to store on audit columns (``approved_by``, ``admin``)."""
        return self.user

    def __str__(self):
        return self.user.email


@dataclass(frozen=True)
class SystemAdmin:

    is_admin = True
    user_id = None
    record = None

    def __str__(self):
        return 'system'


SYSTEM_ADMIN = SystemAdmin()


def actor_for(user):
    """Wrap an authenticated user as an actor."""
    return RealUser(user)

"""Who is making the request.

Identity is a tagged variant resolved once per request by the
authenticate middleware: Anonymous when no credentials were presented,
Authenticated when a bearer token resolved to a user. Callers branch on
is_anonymous (or isinstance), never on field values.
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from starbloom.db.models import User


@dataclass(frozen=True)
class Anonymous:
    is_anonymous: ClassVar[bool] = True


@dataclass(frozen=True)
class Authenticated:
    user: User
    is_anonymous: ClassVar[bool] = False

    @property
    def user_id(self) -> int:
        return self.user.id


Identity = Union[Anonymous, Authenticated]

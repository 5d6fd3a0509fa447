"""Domain models - call outcomes and the MFA challenge union"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple, Union

from plaid_client.domain.exceptions import PlaidAPIError

if TYPE_CHECKING:
    from plaid_client.infrastructure.schemas import PostResponse


class Environment(str, Enum):
    """Plaid base URLs"""

    SANDBOX = "https://sandbox.plaid.com"
    PRODUCTION = "https://production.plaid.com"

    @classmethod
    def from_name(cls, name: str) -> "Environment":
        """Resolve "sandbox" / "production" (case-insensitive)"""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown Plaid environment: {name!r}") from None


@dataclass(frozen=True)
class Credentials:
    """Client id and secret embedded in every authenticated envelope"""

    client_id: str
    secret: str = field(repr=False)


@dataclass(frozen=True)
class MFADevice:
    message: str


@dataclass(frozen=True)
class MFAListEntry:
    """Masked account the user may receive a code on"""

    mask: str
    type: str


@dataclass(frozen=True)
class MFAQuestion:
    question: str


@dataclass(frozen=True)
class MFASelection:
    question: str
    answers: Tuple[str, ...]


@dataclass(frozen=True)
class Success:
    """Status 200: the operation completed"""

    response: PostResponse


@dataclass(frozen=True)
class Challenge:
    """
    Status 201: Plaid needs an MFA answer before it can continue.

    Switch on ``type``. Only the payload matching it is populated; for a
    type the client does not know, every payload is empty.
    """

    access_token: str
    type: str
    device: Optional[MFADevice] = None
    list: Tuple[MFAListEntry, ...] = ()
    questions: Tuple[MFAQuestion, ...] = ()
    selections: Tuple[MFASelection, ...] = ()


@dataclass(frozen=True)
class Failure:
    """Status >= 400: Plaid returned an error payload"""

    error: PlaidAPIError

    @property
    def status_code(self) -> int:
        return self.error.status_code


Outcome = Union[Success, Challenge, Failure]

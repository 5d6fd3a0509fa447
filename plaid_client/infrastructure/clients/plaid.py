"""Plaid API client: one method per remote operation"""

from datetime import date
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import BaseModel

from plaid_client.config import Settings
from plaid_client.domain.exceptions import DecodeError
from plaid_client.domain.models import (
    Challenge,
    Credentials,
    Environment,
    Failure,
    Outcome,
)
from plaid_client.infrastructure.decoder import decode, decode_model
from plaid_client.infrastructure.observability.metrics import record_outcome
from plaid_client.infrastructure.schemas import (
    AccessTokenRequest,
    ConnectPatchRequest,
    ConnectRequest,
    ConnectStepRequest,
    DeleteResponse,
    ExchangeTokenRequest,
    Institution,
    InstitutionByIdRequest,
    InstitutionResponse,
    PostResponse,
    TransactionOptions,
    TransactionsRequest,
)
from plaid_client.infrastructure.transport import DEFAULT_USER_AGENT, Transport
from plaid_client.utils.date_utils import to_plaid_date


class PlaidClient:
    """
    Client for the Plaid API.

    Holds credentials, environment and an HTTP client, none of which change
    after construction, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        credentials: Credentials,
        environment: Environment = Environment.SANDBOX,
        http_client: Optional[httpx.Client] = None,
        timeout: float | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.credentials = credentials
        self.environment = environment
        self.transport = Transport(environment, http_client=http_client, timeout=timeout, user_agent=user_agent)

    @classmethod
    def from_settings(cls, config: Settings, http_client: Optional[httpx.Client] = None) -> "PlaidClient":
        """Build a client from PLAID_* configuration"""
        if not config.client_id or not config.secret:
            raise ValueError("PLAID_CLIENT_ID and PLAID_SECRET are required.")

        return cls(
            Credentials(client_id=config.client_id, secret=config.secret),
            environment=Environment.from_name(config.environment),
            http_client=http_client,
            timeout=config.timeout_seconds,
            user_agent=config.user_agent,
        )

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> "PlaidClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _envelope(self) -> Dict[str, str]:
        return {"client_id": self.credentials.client_id, "secret": self.credentials.secret}

    # MFA-capable operations return the full outcome

    def add_user(
        self,
        institution_type: str,
        username: str,
        password: str,
        pin: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
        timeout: float | None = None,
    ) -> Outcome:
        """POST /connect - link a user's bank login; may answer with an MFA challenge"""
        envelope = ConnectRequest(
            **self._envelope(),
            type=institution_type,
            username=username,
            password=password,
            pin=pin,
            options=options,
        )
        return self._call("POST", "/connect", envelope, timeout)

    def step_user(
        self,
        access_token: str,
        mfa_answer: str,
        options: Optional[Dict[str, Any]] = None,
        timeout: float | None = None,
    ) -> Outcome:
        """POST /connect/step - answer the pending challenge; may yield another one"""
        envelope = ConnectStepRequest(**self._envelope(), access_token=access_token, mfa=mfa_answer, options=options)
        return self._call("POST", "/connect/step", envelope, timeout)

    def patch_user(
        self,
        access_token: str,
        username: str,
        password: str,
        pin: Optional[str] = None,
        timeout: float | None = None,
    ) -> Outcome:
        """PATCH /connect - update credentials after the bank login changed"""
        envelope = ConnectPatchRequest(
            **self._envelope(),
            access_token=access_token,
            username=username,
            password=password,
            pin=pin,
        )
        return self._call("PATCH", "/connect", envelope, timeout)

    # Operations that never challenge return the success payload or raise

    def transactions(
        self,
        access_token: str,
        start_date: Union[date, str],
        end_date: Union[date, str],
        count: int = 100,
        offset: int = 0,
        timeout: float | None = None,
    ) -> PostResponse:
        """
        Fetch transactions between two dates (inclusive).

        Raises:
            PlaidAPIError: Plaid returned an error payload
        """
        envelope = TransactionsRequest(
            **self._envelope(),
            access_token=access_token,
            start_date=to_plaid_date(start_date),
            end_date=to_plaid_date(end_date),
            options=TransactionOptions(count=count, offset=offset),
        )
        return self._call_success("/transactions/get", envelope, timeout)

    def accounts(self, access_token: str, timeout: float | None = None) -> PostResponse:
        envelope = AccessTokenRequest(**self._envelope(), access_token=access_token)
        return self._call_success("/accounts/get", envelope, timeout)

    def balance(self, access_token: str, timeout: float | None = None) -> PostResponse:
        """Real-time balances for every account on the item"""
        envelope = AccessTokenRequest(**self._envelope(), access_token=access_token)
        return self._call_success("/accounts/balance/get", envelope, timeout)

    def auth(self, access_token: str, timeout: float | None = None) -> PostResponse:
        envelope = AccessTokenRequest(**self._envelope(), access_token=access_token)
        return self._call_success("/auth/get", envelope, timeout)

    def item(self, access_token: str, timeout: float | None = None) -> PostResponse:
        envelope = AccessTokenRequest(**self._envelope(), access_token=access_token)
        return self._call_success("/item/get", envelope, timeout)

    def exchange_token(
        self,
        public_token: str,
        account_id: Optional[str] = None,
        timeout: float | None = None,
    ) -> PostResponse:
        """
        Exchange a Link public token for an access token.

        With ``account_id`` the response also carries a Stripe bank account
        token for that account.
        """
        envelope = ExchangeTokenRequest(**self._envelope(), public_token=public_token, account_id=account_id)
        return self._call_success("/exchange_token", envelope, timeout)

    def delete_user(self, access_token: str, timeout: float | None = None) -> DeleteResponse:
        """DELETE /connect - remove the user; success is just a message"""
        envelope = AccessTokenRequest(**self._envelope(), access_token=access_token)
        raw = self.transport.send("DELETE", "/connect", envelope, timeout=timeout)
        return decode_model(DeleteResponse, raw.status_code, raw.body)

    # Institutions

    def get_institution_by_id(
        self,
        public_key: str,
        institution_id: str,
        timeout: float | None = None,
    ) -> Institution:
        """Look up an institution with the public key instead of client credentials"""
        envelope = InstitutionByIdRequest(institution_id=institution_id, public_key=public_key)
        raw = self.transport.send("POST", "/institutions/get_by_id", envelope, timeout=timeout)
        return decode_model(InstitutionResponse, raw.status_code, raw.body).institution

    def get_institution(self, institution_id: str, timeout: float | None = None) -> Institution:
        """Unauthenticated GET /institutions/all/{id}"""
        if not institution_id:
            raise ValueError("institution_id is required")

        raw = self.transport.get(f"/institutions/all/{institution_id}", timeout=timeout)
        return decode_model(Institution, raw.status_code, raw.body)

    def _call(self, method: str, path: str, envelope: BaseModel, timeout: float | None) -> Outcome:
        raw = self.transport.send(method, path, envelope, timeout=timeout)
        outcome = decode(raw.status_code, raw.body)
        record_outcome(path, outcome)
        return outcome

    def _call_success(self, path: str, envelope: BaseModel, timeout: float | None) -> PostResponse:
        outcome = self._call("POST", path, envelope, timeout)

        if isinstance(outcome, Failure):
            raise outcome.error
        if isinstance(outcome, Challenge):
            raise DecodeError(f"Unexpected {outcome.type!r} mfa challenge from {path}")

        return outcome.response

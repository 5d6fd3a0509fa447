"""Client-side exceptions"""

from typing import Optional


class PlaidClientException(Exception):
    """Base exception for the client"""

    pass


class TransportError(PlaidClientException):
    """Request could not be completed over HTTP"""

    pass


class SerializationError(TransportError):
    """Request envelope could not be serialized to JSON"""

    pass


class NetworkError(TransportError):
    """Request could not be sent or no response was received"""

    pass


class RequestTimeoutError(NetworkError):
    """Request deadline expired"""

    pass


class BodyReadError(TransportError):
    """Response body could not be read"""

    pass


class DecodeError(PlaidClientException):
    """Response body does not match the shape expected for its status code"""

    pass


class UnknownStatusError(PlaidClientException):
    """Response status code is outside the set the API uses"""

    def __init__(self, status_code: int):
        super().__init__(f"Unknown Plaid error - status: {status_code}")
        self.status_code = status_code


class PlaidAPIError(PlaidClientException):
    """
    Error payload returned by Plaid.

    The status code is not part of the body and is attached from the HTTP
    response. See https://plaid.com/docs/errors/ for the code catalogue.
    """

    def __init__(
        self,
        error_code: str,
        error_type: str,
        error_message: str,
        status_code: int,
        display_message: Optional[str] = None,
    ):
        super().__init__(error_message)
        self.error_code = error_code
        self.error_type = error_type
        self.error_message = error_message
        self.display_message = display_message
        self.status_code = status_code

    def __str__(self) -> str:
        return (
            f"Plaid error - http status: {self.status_code}, code: {self.error_code}, "
            f"type: {self.error_type}, message: {self.error_message}, display: {self.display_message}"
        )

    def _key(self) -> tuple:
        return (
            self.error_code,
            self.error_type,
            self.error_message,
            self.display_message,
            self.status_code,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlaidAPIError):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

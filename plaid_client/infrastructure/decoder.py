"""
Decode Plaid HTTP responses into call outcomes.

Plaid reuses one wire format for three outcomes and encodes which one it sent
in the status code:

- 200: success body
- 201: MFA challenge, whose ``mfa`` payload shape depends on ``type``
- >= 400: error body

Anything else is an unknown status and is raised, never guessed at.
"""

from typing import Any, Callable, Dict, List, Type, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from plaid_client.domain.exceptions import DecodeError, PlaidAPIError, UnknownStatusError
from plaid_client.domain.models import (
    Challenge,
    Failure,
    MFADevice,
    MFAListEntry,
    MFAQuestion,
    MFASelection,
    Outcome,
    Success,
)
from plaid_client.infrastructure.schemas import (
    ErrorResponse,
    MFADeviceSchema,
    MFAIntermediate,
    MFAListSchema,
    MFAQuestionSchema,
    MFASelectionSchema,
    PostResponse,
)

M = TypeVar("M", bound=BaseModel)

_device_adapter = TypeAdapter(MFADeviceSchema)
_list_adapter = TypeAdapter(List[MFAListSchema])
_questions_adapter = TypeAdapter(List[MFAQuestionSchema])
_selections_adapter = TypeAdapter(List[MFASelectionSchema])


def decode(status_code: int, raw_body: bytes) -> Outcome:
    """
    Classify and parse a response from an MFA-capable endpoint.

    Returns:
        Success, Challenge or Failure depending on the status code

    Raises:
        DecodeError: Body does not match the shape its status code implies
        UnknownStatusError: Status code is not 200, 201 or >= 400
    """
    if status_code == 200:
        return Success(response=_parse(PostResponse, raw_body))

    if status_code == 201:
        return _decode_challenge(_parse(MFAIntermediate, raw_body))

    if status_code >= 400:
        return Failure(error=decode_error(status_code, raw_body))

    raise UnknownStatusError(status_code)


def decode_model(model: Type[M], status_code: int, raw_body: bytes) -> M:
    """
    Decode a response from an endpoint that cannot return a challenge.

    Raises:
        PlaidAPIError: Status >= 400 with a well-formed error body
        DecodeError: Body does not match the expected shape
        UnknownStatusError: Status code is not 200 or >= 400
    """
    if status_code == 200:
        return _parse(model, raw_body)

    if status_code >= 400:
        raise decode_error(status_code, raw_body)

    raise UnknownStatusError(status_code)


def decode_error(status_code: int, raw_body: bytes) -> PlaidAPIError:
    """Build the error value for an error body; the status is not in the body"""
    body = _parse(ErrorResponse, raw_body)
    return PlaidAPIError(
        error_code=body.error_code,
        error_type=body.error_type,
        error_message=body.error_message,
        display_message=body.display_message,
        status_code=status_code,
    )


def _parse(model: Type[M], raw_body: bytes) -> M:
    try:
        return model.model_validate_json(raw_body)
    except ValidationError as e:
        raise DecodeError(f"could not decode {model.__name__}: {e}") from e


def _validate(adapter: TypeAdapter, mfa: Any, mfa_type: str) -> Any:
    try:
        return adapter.validate_python(mfa)
    except ValidationError as e:
        raise DecodeError(f"could not decode {mfa_type} mfa") from e


def _decode_device(mfa: Any) -> Dict[str, Any]:
    device = _validate(_device_adapter, mfa, "device")
    return {"device": MFADevice(message=device.message)}


def _decode_list(mfa: Any) -> Dict[str, Any]:
    entries = _validate(_list_adapter, mfa, "list")
    return {"list": tuple(MFAListEntry(mask=e.mask, type=e.type) for e in entries)}


def _decode_questions(mfa: Any) -> Dict[str, Any]:
    questions = _validate(_questions_adapter, mfa, "questions")
    return {"questions": tuple(MFAQuestion(question=q.question) for q in questions)}


def _decode_selections(mfa: Any) -> Dict[str, Any]:
    selections = _validate(_selections_adapter, mfa, "selections")
    return {
        "selections": tuple(
            MFASelection(question=s.question, answers=tuple(s.answers)) for s in selections
        )
    }


_MFA_DECODERS: Dict[str, Callable[[Any], Dict[str, Any]]] = {
    "device": _decode_device,
    "list": _decode_list,
    "questions": _decode_questions,
    "selections": _decode_selections,
}


def _decode_challenge(intermediate: MFAIntermediate) -> Challenge:
    # Unknown tags are passed through with every payload empty
    mfa_type = intermediate.type or ""
    decoder = _MFA_DECODERS.get(mfa_type)
    payload = decoder(intermediate.mfa) if decoder else {}
    return Challenge(access_token=intermediate.access_token or "", type=mfa_type, **payload)

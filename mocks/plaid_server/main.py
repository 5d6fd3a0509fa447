from fastapi import Body, FastAPI
from fastapi.responses import JSONResponse
from pathlib import Path
from typing import Any, Dict
import json
import os

app = FastAPI(title="Mock Plaid Sandbox", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path("/plaid_stub") if os.path.exists("/plaid_stub") else Path(__file__).resolve().parents[1] / "plaid_stub"

CLIENT_ID = "test_id"
SECRET = "test_secret"
PUBLIC_KEY = "test_public_key"
GOOD_PASSWORD = "plaid_good"
MFA_ANSWER = "tomato"

# Institution type -> MFA type it challenges with; others link without MFA
MFA_INSTITUTIONS = {
    "chase": "device",
    "citi": "list",
    "usaa": "questions",
    "bofa": "selections",
    "amex": "captcha",
}

MFA_PAYLOADS: Dict[str, Any] = {
    "device": {"message": "Code sent to t..t@plaid.com"},
    "list": [{"mask": "t..t@plaid.com", "type": "email"}, {"mask": "xxx-xxx-5309", "type": "phone"}],
    "questions": [{"question": "You say tomato, I say...?"}],
    "selections": [
        {"question": "Did you buy a car in 2013?", "answers": ["Yes", "No"]},
        {"question": "What is your favorite color?", "answers": ["red", "blue", "green"]},
    ],
    "captcha": {"image": "data:image/png;base64,iVBORw0KGgo="},
}


def _load(name: str) -> Any:
    return json.loads((DATA_DIR / f"{name}.json").read_text())


def plaid_error(status_code: int, error_code: str, error_type: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "error_type": error_type,
            "error_message": message,
            "display_message": None,
        },
    )


def _bad_credentials(body: Dict[str, Any]) -> JSONResponse | None:
    if body.get("client_id") != CLIENT_ID or body.get("secret") != SECRET:
        return plaid_error(400, "INVALID_API_KEYS", "INVALID_INPUT", "invalid client_id or secret provided")
    return None


def _institution_for(access_token: str | None) -> str | None:
    if not access_token or not access_token.startswith("test_"):
        return None
    return access_token[len("test_"):]


def _linked(institution_type: str) -> JSONResponse:
    return JSONResponse(content={"access_token": f"test_{institution_type}", **_load("accounts")})


@app.get("/health")
def health(): return {"status": "ok"}


@app.post("/connect")
def add_user(body: Dict[str, Any] = Body(...)):
    if (error := _bad_credentials(body)) is not None:
        return error
    if body.get("password") != GOOD_PASSWORD:
        return plaid_error(402, "INVALID_CREDENTIALS", "ITEM_ERROR", "the provided credentials were not correct")

    institution_type = body.get("type", "")
    mfa_type = MFA_INSTITUTIONS.get(institution_type)
    if mfa_type is None:
        return _linked(institution_type)

    return JSONResponse(
        status_code=201,
        content={"access_token": f"test_{institution_type}", "type": mfa_type, "mfa": MFA_PAYLOADS[mfa_type]},
    )


@app.post("/connect/step")
def step_user(body: Dict[str, Any] = Body(...)):
    if (error := _bad_credentials(body)) is not None:
        return error
    institution_type = _institution_for(body.get("access_token"))
    if institution_type is None:
        return plaid_error(400, "INVALID_ACCESS_TOKEN", "INVALID_INPUT", "provided access token is in an invalid format")

    answer = body.get("mfa")
    if answer == MFA_ANSWER:
        return _linked(institution_type)
    if answer == "again" and institution_type in MFA_INSTITUTIONS:
        mfa_type = MFA_INSTITUTIONS[institution_type]
        return JSONResponse(
            status_code=201,
            content={"access_token": body["access_token"], "type": mfa_type, "mfa": MFA_PAYLOADS[mfa_type]},
        )
    return plaid_error(402, "INVALID_MFA", "ITEM_ERROR", "the provided MFA response(s) were not correct")


@app.patch("/connect")
def patch_user(body: Dict[str, Any] = Body(...)):
    if (error := _bad_credentials(body)) is not None:
        return error
    institution_type = _institution_for(body.get("access_token"))
    if institution_type is None:
        return plaid_error(400, "INVALID_ACCESS_TOKEN", "INVALID_INPUT", "provided access token is in an invalid format")
    if body.get("password") != GOOD_PASSWORD:
        return plaid_error(402, "INVALID_CREDENTIALS", "ITEM_ERROR", "the provided credentials were not correct")
    return _linked(institution_type)


@app.delete("/connect")
def delete_user(body: Dict[str, Any] = Body(...)):
    if (error := _bad_credentials(body)) is not None:
        return error
    if _institution_for(body.get("access_token")) is None:
        return plaid_error(400, "INVALID_ACCESS_TOKEN", "INVALID_INPUT", "provided access token is in an invalid format")
    return {"message": "Successfully removed from your account"}


@app.post("/transactions/get")
def get_transactions(body: Dict[str, Any] = Body(...)):
    if (error := _bad_credentials(body)) is not None:
        return error
    if _institution_for(body.get("access_token")) is None:
        return plaid_error(400, "INVALID_ACCESS_TOKEN", "INVALID_INPUT", "provided access token is in an invalid format")

    start, end = body.get("start_date", ""), body.get("end_date", "")
    transactions = [t for t in _load("transactions")["transactions"] if start <= t["date"] <= end]
    options = body.get("options") or {}
    offset, count = options.get("offset", 0), options.get("count", 100)
    return {
        **_load("accounts"),
        "transactions": transactions[offset:offset + count],
        "total_transactions": len(transactions),
        "item": {"institution_id": "ins_109508", "item_id": "item_sandbox", "webhook": None},
    }


@app.post("/accounts/get")
def get_accounts(body: Dict[str, Any] = Body(...)):
    if (error := _bad_credentials(body)) is not None:
        return error
    if _institution_for(body.get("access_token")) is None:
        return plaid_error(400, "INVALID_ACCESS_TOKEN", "INVALID_INPUT", "provided access token is in an invalid format")
    return _load("accounts")


@app.post("/item/get")
def get_item(body: Dict[str, Any] = Body(...)):
    if (error := _bad_credentials(body)) is not None:
        return error
    if _institution_for(body.get("access_token")) is None:
        return plaid_error(404, "ITEM_NOT_FOUND", "ITEM_ERROR", "the requested item was not found")
    return {"item": {"institution_id": "ins_109508", "item_id": "item_sandbox", "webhook": "https://example.com/hook"}}


@app.post("/institutions/get_by_id")
def get_institution_by_id(body: Dict[str, Any] = Body(...)):
    if body.get("public_key") != PUBLIC_KEY:
        return plaid_error(400, "INVALID_PUBLIC_KEY", "INVALID_INPUT", "public key is invalid")
    institution = _load("institutions").get(body.get("institution_id"))
    if institution is None:
        return plaid_error(400, "INVALID_INSTITUTION", "INVALID_INPUT", "invalid institution_id provided")
    return {"institution": institution}


@app.get("/institutions/all/{institution_id}")
def get_institution(institution_id: str):
    institution = _load("institutions").get(institution_id)
    if institution is None:
        return plaid_error(404, "INVALID_INSTITUTION", "INVALID_INPUT", "invalid institution_id provided")
    return institution

"""Pydantic schemas for Plaid request envelopes and response bodies"""

from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationInfo,
    field_validator,
)


# Outbound envelopes


class ClientEnvelope(BaseModel):
    """Base for every authenticated request body"""

    model_config = ConfigDict(frozen=True)

    client_id: str
    secret: str


class TransactionOptions(BaseModel):
    """Pagination for /transactions/get"""

    model_config = ConfigDict(frozen=True)

    count: int = Field(100, ge=1, le=500)
    offset: int = Field(0, ge=0)


class TransactionsRequest(ClientEnvelope):
    """Request body for POST /transactions/get"""

    access_token: str
    start_date: str
    end_date: str
    options: TransactionOptions = TransactionOptions()


class AccessTokenRequest(ClientEnvelope):
    """Request body for endpoints keyed only by an access token"""

    access_token: str


class ConnectRequest(ClientEnvelope):
    """Request body for POST /connect"""

    type: str
    username: str
    password: str
    pin: Optional[str] = None
    options: Optional[Dict[str, Any]] = None


class ConnectStepRequest(ClientEnvelope):
    """Request body for POST /connect/step"""

    access_token: str
    mfa: str
    options: Optional[Dict[str, Any]] = None


class ConnectPatchRequest(ClientEnvelope):
    """Request body for PATCH /connect"""

    access_token: str
    username: str
    password: str
    pin: Optional[str] = None


class ExchangeTokenRequest(ClientEnvelope):
    """Request body for POST /exchange_token"""

    public_token: str
    account_id: Optional[str] = None


class InstitutionByIdRequest(BaseModel):
    """Request body for POST /institutions/get_by_id, keyed by public key"""

    model_config = ConfigDict(frozen=True)

    institution_id: str
    public_key: str


# Inbound bodies


class Balances(BaseModel):
    available: Optional[StrictFloat] = None
    current: Optional[StrictFloat] = None
    limit: Optional[StrictFloat] = None


class Account(BaseModel):
    """Account as returned by accounts, auth and balance endpoints"""

    account_id: Optional[StrictStr] = None
    type: Optional[StrictStr] = None
    subtype: Optional[StrictStr] = None
    mask: Optional[StrictStr] = None
    name: Optional[StrictStr] = None
    official_name: Optional[StrictStr] = None
    balances: Balances = Balances()

    @field_validator("balances", mode="before")
    @classmethod
    def null_balances(cls, value: Any) -> Any:
        return Balances() if value is None else value


class Location(BaseModel):
    address: Optional[StrictStr] = None
    city: Optional[StrictStr] = None
    state: Optional[StrictStr] = None
    zip: Optional[StrictStr] = None
    lat: Optional[StrictFloat] = None
    lon: Optional[StrictFloat] = None
    store_number: Optional[StrictStr] = None


class PaymentMeta(BaseModel):
    reference_number: Optional[StrictStr] = None
    ppd_id: Optional[StrictStr] = None
    payee: Optional[StrictStr] = None
    payer: Optional[StrictStr] = None
    by_order_of: Optional[StrictStr] = None
    payment_method: Optional[StrictStr] = None
    payment_processor: Optional[StrictStr] = None
    reason: Optional[StrictStr] = None


class Transaction(BaseModel):
    """Single posted or pending transaction"""

    transaction_id: Optional[StrictStr] = None
    account_id: Optional[StrictStr] = None
    account_owner: Optional[StrictStr] = None
    name: Optional[StrictStr] = None
    amount: Optional[StrictFloat] = None
    date: Optional[StrictStr] = None
    category: Optional[List[StrictStr]] = None
    category_id: Optional[StrictStr] = None
    transaction_type: Optional[StrictStr] = None
    pending: Optional[StrictBool] = None
    pending_transaction_id: Optional[StrictStr] = None
    location: Location = Location()
    payment_meta: PaymentMeta = PaymentMeta()

    @field_validator("location", "payment_meta", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        """A null sub-object decodes like a missing one"""
        if value is None:
            return Location() if info.field_name == "location" else PaymentMeta()
        return value


class Item(BaseModel):
    institution_id: Optional[StrictStr] = None
    item_id: Optional[StrictStr] = None
    webhook: Optional[StrictStr] = None


class PostResponse(BaseModel):
    """
    Success body shared by every authenticated endpoint.

    Endpoints populate different subsets, so every field is optional.
    """

    access_token: Optional[StrictStr] = None
    account_id: Optional[StrictStr] = None
    accounts: List[Account] = []
    stripe_bank_account_token: Optional[StrictStr] = None
    mfa: Optional[StrictStr] = None
    transactions: List[Transaction] = []
    total_transactions: Optional[StrictInt] = None
    item: Optional[Item] = None

    @field_validator("accounts", "transactions", mode="before")
    @classmethod
    def null_as_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value


class MFAIntermediate(BaseModel):
    """Status 201 body; the shape of ``mfa`` depends on ``type``"""

    access_token: Optional[StrictStr] = None
    type: Optional[StrictStr] = None
    mfa: Any = None


class MFADeviceSchema(BaseModel):
    message: StrictStr


class MFAListSchema(BaseModel):
    mask: StrictStr
    type: StrictStr


class MFAQuestionSchema(BaseModel):
    question: StrictStr


class MFASelectionSchema(BaseModel):
    answers: List[StrictStr]
    question: StrictStr


class ErrorResponse(BaseModel):
    """Canonical Plaid error body"""

    error_code: StrictStr
    error_type: StrictStr
    error_message: StrictStr
    display_message: Optional[StrictStr] = None


class DeleteResponse(BaseModel):
    """Success body for DELETE /connect"""

    message: StrictStr


class Institution(BaseModel):
    institution_id: Optional[StrictStr] = None
    name: StrictStr


class InstitutionResponse(BaseModel):
    """Success body for POST /institutions/get_by_id"""

    institution: Institution

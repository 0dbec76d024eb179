"""Trade ingestion and account stats schemas"""

from pydantic import BaseModel, StrictFloat, StrictStr


class TradeRequest(BaseModel):
    """
    Inbound trade record.

    Types are strict: "1.5" or true for a price is a malformed request, while
    JSON integers are still accepted as numbers. Fields default to
    empty/zero so a missing field is reported by the ingestion rules (e.g.
    "Account must not be empty") rather than as a schema error.
    """

    account: StrictStr = ""
    symbol: StrictStr = ""
    volume: StrictFloat = 0.0
    open: StrictFloat = 0.0
    close: StrictFloat = 0.0
    side: StrictStr = ""


class AccountStatsResponse(BaseModel):
    account: str
    trades: int = 0
    profit: float = 0.0

    class Config:
        from_attributes = True

"""
Data models for Alpha Vantage weekly series and curated price points
"""

from datetime import date
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class WeeklyBar(BaseModel):
    """One entry of the weekly time series. Only the closing price is kept."""

    model_config = ConfigDict(populate_by_name=True)

    close: str = Field("", alias="4a. close (EUR)")


class SeriesMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    last_refreshed: str = Field("", alias="6. Last Refreshed")


class RawTimeSeries(BaseModel):
    """
    Weekly series as returned by the API

    Keys that are absent from the payload decode to empty values; the
    extractor decides whether that is usable.
    """

    model_config = ConfigDict(populate_by_name=True)

    meta_data: SeriesMetadata = Field(default_factory=SeriesMetadata, alias="Meta Data")
    time_series: Dict[str, WeeklyBar] = Field(
        default_factory=dict, alias="Time Series (Digital Currency Weekly)"
    )

    @property
    def last_refreshed(self) -> str:
        return self.meta_data.last_refreshed


class CuratedPricePoint(BaseModel):
    """
    Validated weekly closing price for a symbol
    """

    symbol: str = Field(..., min_length=1, description="Symbol code")
    timestamp: date = Field(..., description="Sunday that starts the reported week")
    value: float = Field(..., ge=0, allow_inf_nan=False, description="Closing price")

    model_config = ConfigDict(frozen=True)

    @field_serializer("timestamp")
    def _serialize_timestamp(self, v, _info):
        return v.isoformat()

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v):
        if not v.strip():
            raise ValueError("Symbol cannot be empty")
        return v.strip()

    def to_row(self) -> Dict[str, object]:
        """Row parameters for the price table"""
        return {"symbol": self.symbol, "timestamp": self.timestamp.isoformat(), "value": self.value}

"""Push notification models."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NotificationPayload(BaseModel):
    """Human-readable part of a push."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    title: str
    body: str
    image_url: Optional[str] = Field(None, description="Large image, usually the league logo")


class TokenSendResult(BaseModel):
    """Outcome for one device token."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    token: str
    success: bool
    message_id: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    invalid_token: bool = Field(False, description="Permanent failure; prune the token")


class MulticastResult(BaseModel):
    """Aggregate outcome of a (possibly batched) multicast send."""

    model_config = ConfigDict(extra='ignore', validate_assignment=True)

    success: bool = False
    success_count: int = 0
    failure_count: int = 0
    results: List[TokenSendResult] = Field(default_factory=list)

    @property
    def failed_tokens(self) -> List[str]:
        return [r.token for r in self.results if not r.success]

    @property
    def invalid_tokens(self) -> List[str]:
        return [r.token for r in self.results if r.invalid_token]

    def to_dict(self) -> Dict[str, object]:
        """Response shape of the relay helpers."""
        return {
            'success': self.success,
            'successCount': self.success_count,
            'failureCount': self.failure_count,
            'failedTokens': [
                {'token': r.token, 'error': r.error_code} for r in self.results if not r.success
            ],
        }

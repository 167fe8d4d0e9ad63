# =============================================================================
# core/models/account.py - Account Deletion Schemas
# =============================================================================

from pydantic import BaseModel, Field


class DeleteAccountRequest(BaseModel):
    """The user must type DELETE to confirm."""
    confirmation: str = Field(..., examples=["DELETE"])


class DeletionStep(BaseModel):
    """Outcome of purging one table."""
    table: str
    success: bool
    rows_deleted: int = 0
    error: str | None = None


class AccountDeletionReport(BaseModel):
    """
    What was removed during account deletion.

    Steps are best-effort; only a failed identity deletion aborts the
    operation (and is raised, not reported).
    """
    user_id: str
    steps: list[DeletionStep] = Field(default_factory=list)
    success: bool = True
    message: str = "Account successfully deleted"

    @property
    def failed_tables(self) -> list[str]:
        return [step.table for step in self.steps if not step.success]

# =============================================================================
# core/models/template.py - Template Migration Schemas
# =============================================================================
# Templates themselves are opaque SVG configs edited in the browser. The
# backend only touches them through one-off migrations, whose outcome is
# reported with these models.
# =============================================================================

from pydantic import BaseModel, Field


class TemplateMigrationResult(BaseModel):
    """
    Outcome of a bulk template migration.

    Example:
        {
            "migration": "api_field_prefix",
            "total_processed": 12,
            "updated_count": 4,
            "updated_templates": ["Game Preview", ...],
            "failed_templates": []
        }
    """
    migration: str
    total_processed: int = Field(default=0, ge=0)
    updated_count: int = Field(default=0, ge=0)
    updated_templates: list[str] = Field(default_factory=list)
    failed_templates: list[str] = Field(default_factory=list)

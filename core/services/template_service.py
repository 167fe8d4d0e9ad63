# =============================================================================
# core/services/template_service.py - System Template Migrations
# =============================================================================
# One-off bulk rewrites of the svg_config of system templates:
# - api_field_prefix: "teamHome2" -> "game-2.teamHome" (multi-game templates
#   moved from suffix to prefix notation)
# - strip_result_detail: drop "result-detail" elements from result templates
#
# The element transforms are pure functions; TemplateService applies them
# and only writes templates that actually changed.
# =============================================================================

import logging
import re
from typing import Any, Callable

from lib.supabase_client import SupabaseClient
from app.exceptions import StoreUnavailableError
from core.models.template import TemplateMigrationResult

logger = logging.getLogger(__name__)

TABLE = "templates"

# A field name followed by a single game digit, e.g. teamHomeLogo3
SUFFIX_FIELD = re.compile(r"^(.+?)(\d)$")

RESULT_DETAIL_MARKER = "result-detail"

Element = dict[str, Any]


def convert_api_field(api_field: str) -> str:
    """
    Convert suffix game notation to prefix notation.

    Example:
        convert_api_field("teamHome2")   # "game-2.teamHome"
        convert_api_field("teamHome")    # "teamHome"
    """
    match = SUFFIX_FIELD.match(api_field)
    if not match:
        return api_field
    field_name, game_number = match.groups()
    return f"game-{game_number}.{field_name}"


def migrate_elements(elements: list[Element]) -> tuple[list[Element], bool]:
    """Rewrite apiField of every element; returns (elements, modified)."""
    modified = False
    migrated = []
    for element in elements:
        api_field = element.get("apiField")
        if api_field:
            new_field = convert_api_field(api_field)
            if new_field != api_field:
                logger.debug(f"Converting {api_field} to {new_field}")
                element = {**element, "apiField": new_field}
                modified = True
        migrated.append(element)
    return migrated, modified


def strip_result_detail(elements: list[Element]) -> tuple[list[Element], bool]:
    """Remove elements whose id contains "result-detail"."""
    kept = [e for e in elements if RESULT_DETAIL_MARKER not in (e.get("id") or "")]
    return kept, len(kept) != len(elements)


class TemplateService:
    """
    Service for system template migrations (admin only).
    """

    @staticmethod
    def migrate_api_fields() -> TemplateMigrationResult:
        """Convert suffix apiFields of all system templates."""
        templates = TemplateService._fetch_system_templates()
        return TemplateService._apply("api_field_prefix", templates, migrate_elements)

    @staticmethod
    def strip_result_details() -> TemplateMigrationResult:
        """Remove result-detail elements from system result templates."""
        templates = TemplateService._fetch_system_templates(name_pattern="%result%")
        return TemplateService._apply("strip_result_detail", templates, strip_result_detail)

    @staticmethod
    def _fetch_system_templates(name_pattern: str | None = None) -> list[dict[str, Any]]:
        try:
            client = SupabaseClient.get_client()
            query = (
                client.table(TABLE)
                .select("id, name, svg_config")
                .eq("is_system", True)
            )
            if name_pattern:
                query = query.ilike("name", name_pattern)
            response = query.execute()
        except Exception as e:
            raise StoreUnavailableError("fetch_system_templates", str(e))
        return response.data or []

    @staticmethod
    def _apply(
        migration: str,
        templates: list[dict[str, Any]],
        transform: Callable[[list[Element]], tuple[list[Element], bool]],
    ) -> TemplateMigrationResult:
        result = TemplateMigrationResult(migration=migration, total_processed=len(templates))
        client = SupabaseClient.get_client()

        for template in templates:
            svg_config = template.get("svg_config") or {}
            elements = svg_config.get("elements")
            if not elements:
                continue

            new_elements, modified = transform(elements)
            if not modified:
                continue

            try:
                client.table(TABLE).update({
                    "svg_config": {**svg_config, "elements": new_elements}
                }).eq("id", template["id"]).execute()
            except Exception as e:
                logger.error(f"Error updating template {template.get('name')}: {e}")
                result.failed_templates.append(template.get("name") or str(template["id"]))
                continue

            result.updated_templates.append(template.get("name") or str(template["id"]))
            logger.info(f"Updated template: {template.get('name')}")

        result.updated_count = len(result.updated_templates)
        logger.info(
            f"Migration {migration}: updated {result.updated_count} of "
            f"{result.total_processed} system templates"
        )
        return result

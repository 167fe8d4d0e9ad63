# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - mailer.py: SMTP email sending
# - utils.py: Shared utilities (UUID normalization, UTC timestamps)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.mailer import MailerError, send_email
from lib.utils import normalize_uuid, parse_timestamp, to_iso, utc_now

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Mail
    "MailerError",
    "send_email",
    # Utils
    "normalize_uuid",
    "parse_timestamp",
    "to_iso",
    "utc_now",
]

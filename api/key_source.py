"""Sources for the Gemini API key: environment variable or a Supabase table."""
import logging
import os

from supabase import create_client, Client

from api.config import GEMINI_SERVICE_NAME, get_keys_table

logger = logging.getLogger(__name__)


class KeySourceError(Exception):
    """The API key could not be obtained."""


class MissingConfig(KeySourceError):
    pass


class StoreUnavailable(KeySourceError):
    pass


class KeyNotFound(KeySourceError):
    pass


class AmbiguousKey(KeySourceError):
    pass


class EnvKeySource:
    """Reads the key from a single environment variable."""

    def __init__(self, var_name: str = 'GEMINI_API_KEY'):
        self.var_name = var_name

    def fetch_key(self) -> str:
        key = os.environ.get(self.var_name)
        if not key:
            raise MissingConfig(
                f'Missing {self.var_name} environment variable. '
                'Please set it in your .env file or Vercel dashboard.'
            )
        return key


class SupabaseKeySource:
    """Looks up the row for a service name in a Supabase keys table.

    The client is created lazily from SUPABASE_URL and SUPABASE_SERVICE_KEY
    unless one is passed in. Exactly one matching row must exist; several
    rows for the same service raise AmbiguousKey instead of picking one.
    """

    def __init__(self, client: Client | None = None,
                 service_name: str = GEMINI_SERVICE_NAME,
                 table: str | None = None):
        self._client = client
        self.service_name = service_name
        self.table = table or get_keys_table()

    def get_client(self) -> Client:
        if self._client is not None:
            return self._client
        url = os.environ.get('SUPABASE_URL')
        key = os.environ.get('SUPABASE_SERVICE_KEY')
        if not url or not key:
            raise MissingConfig('SUPABASE_URL and SUPABASE_SERVICE_KEY must be set')
        try:
            return create_client(url, key)
        except Exception as e:
            raise StoreUnavailable(f'Could not connect to Supabase: {e}') from e

    def fetch_key(self) -> str:
        client = self.get_client()
        try:
            # Two rows are enough to tell a unique match from an ambiguous one
            result = (
                client.table(self.table)
                .select('api_key')
                .eq('service_name', self.service_name)
                .limit(2)
                .execute()
            )
        except Exception as e:
            raise StoreUnavailable(
                f'Failed to fetch {self.service_name} API key from Supabase: {e}'
            ) from e

        rows = result.data or []
        if not rows:
            raise KeyNotFound(f'No API key stored for service "{self.service_name}"')
        if len(rows) > 1:
            raise AmbiguousKey(
                f'More than one API key stored for service "{self.service_name}"'
            )
        key = rows[0].get('api_key')
        if not key:
            raise KeyNotFound(f'API key for service "{self.service_name}" is empty')
        return key


def get_key_source():
    """Pick the key source configured by KEY_SOURCE (env or supabase)."""
    kind = os.environ.get('KEY_SOURCE', 'env').strip().lower()
    if kind == 'supabase':
        return SupabaseKeySource()
    if kind == 'env':
        return EnvKeySource()
    raise MissingConfig(f'Unknown KEY_SOURCE: {kind}')

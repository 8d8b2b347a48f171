from unittest.mock import MagicMock, patch

import pytest

from api.key_source import (
    AmbiguousKey, EnvKeySource, KeyNotFound, MissingConfig, StoreUnavailable,
    SupabaseKeySource, get_key_source,
)


def supabase_returning(rows):
    client = MagicMock()
    query = client.table.return_value.select.return_value.eq.return_value.limit.return_value
    query.execute.return_value = MagicMock(data=rows)
    return client


def test_env_key_source(monkeypatch):
    monkeypatch.setenv('GEMINI_API_KEY', 'abc')
    assert EnvKeySource().fetch_key() == 'abc'


@pytest.mark.parametrize('value', [None, ''])
def test_env_key_source_missing(monkeypatch, value):
    if value is not None:
        monkeypatch.setenv('GEMINI_API_KEY', value)
    with pytest.raises(MissingConfig, match='GEMINI_API_KEY'):
        EnvKeySource().fetch_key()


def test_supabase_single_row():
    client = supabase_returning([{'api_key': 'stored-key'}])

    assert SupabaseKeySource(client).fetch_key() == 'stored-key'
    client.table.assert_called_once_with('api_keys')
    client.table.return_value.select.return_value.eq.assert_called_once_with('service_name', 'gemini')


def test_supabase_custom_table(monkeypatch):
    monkeypatch.setenv('SUPABASE_KEYS_TABLE', 'secrets')
    client = supabase_returning([{'api_key': 'k'}])

    SupabaseKeySource(client).fetch_key()

    client.table.assert_called_once_with('secrets')


def test_supabase_no_rows():
    with pytest.raises(KeyNotFound):
        SupabaseKeySource(supabase_returning([])).fetch_key()


def test_supabase_empty_key():
    with pytest.raises(KeyNotFound):
        SupabaseKeySource(supabase_returning([{'api_key': ''}])).fetch_key()


def test_supabase_several_rows_is_ambiguous():
    client = supabase_returning([{'api_key': 'one'}, {'api_key': 'two'}])
    with pytest.raises(AmbiguousKey):
        SupabaseKeySource(client).fetch_key()


def test_supabase_query_error():
    client = MagicMock()
    client.table.side_effect = RuntimeError('connection refused')
    with pytest.raises(StoreUnavailable, match='connection refused'):
        SupabaseKeySource(client).fetch_key()


def test_supabase_not_configured():
    with pytest.raises(MissingConfig):
        SupabaseKeySource().fetch_key()


def test_supabase_client_created_from_env(monkeypatch):
    monkeypatch.setenv('SUPABASE_URL', 'https://example.supabase.co')
    monkeypatch.setenv('SUPABASE_SERVICE_KEY', 'service')
    client = supabase_returning([{'api_key': 'k'}])

    with patch('api.key_source.create_client', return_value=client) as create:
        assert SupabaseKeySource().fetch_key() == 'k'

    create.assert_called_once_with('https://example.supabase.co', 'service')


def test_supabase_client_creation_fails(monkeypatch):
    monkeypatch.setenv('SUPABASE_URL', 'not a url')
    monkeypatch.setenv('SUPABASE_SERVICE_KEY', 'service')

    with patch('api.key_source.create_client', side_effect=Exception('Invalid URL')):
        with pytest.raises(StoreUnavailable):
            SupabaseKeySource().fetch_key()


def test_get_key_source(monkeypatch):
    assert isinstance(get_key_source(), EnvKeySource)
    monkeypatch.setenv('KEY_SOURCE', 'Supabase')
    assert isinstance(get_key_source(), SupabaseKeySource)
    monkeypatch.setenv('KEY_SOURCE', 'other')
    with pytest.raises(MissingConfig):
        get_key_source()

"""Tests for per-user pending-input cache."""

import pytest
from unittest.mock import AsyncMock, patch

from monitor_core.models import PendingInputKind
from monitor.storage import pending_input_cache


class TestPendingInputCache:
    """Tests for pending_input_cache module (per-user keys)."""

    @pytest.mark.asyncio
    async def test_set_pending(self):
        """Test storing the pending input for one user."""
        with patch.object(pending_input_cache.cache, 'is_cache_available', return_value=True):
            with patch.object(pending_input_cache.cache, 'set_json', new_callable=AsyncMock, return_value=True) as mock_set:
                pending = await pending_input_cache.set_pending("42", PendingInputKind.SET_ALERT, ttl=60)

                assert pending is not None
                assert pending.user_id == "42"
                assert pending.kind == PendingInputKind.SET_ALERT

                key, data = mock_set.call_args[0]
                assert key == "pending_input:42"
                assert data['kind'] == "set_alert"
                assert mock_set.call_args[1]['ttl'] == 60

    @pytest.mark.asyncio
    async def test_set_pending_cache_unavailable(self):
        with patch.object(pending_input_cache.cache, 'is_cache_available', return_value=False):
            assert await pending_input_cache.set_pending("42", PendingInputKind.SET_CAPITAL) is None

    @pytest.mark.asyncio
    async def test_get_pending(self):
        cached = {
            'user_id': "7",
            'kind': "pnl_calculator",
            'created_at': "2024-01-01T00:00:00+00:00",
        }
        with patch.object(pending_input_cache.cache, 'is_cache_available', return_value=True):
            with patch.object(pending_input_cache.cache, 'get_json', new_callable=AsyncMock, return_value=cached) as mock_get:
                pending = await pending_input_cache.get_pending("7")

                assert pending.kind == PendingInputKind.PNL_CALCULATOR
                mock_get.assert_called_once_with("pending_input:7")

    @pytest.mark.asyncio
    async def test_get_pending_not_found(self):
        with patch.object(pending_input_cache.cache, 'is_cache_available', return_value=True):
            with patch.object(pending_input_cache.cache, 'get_json', new_callable=AsyncMock, return_value=None):
                assert await pending_input_cache.get_pending("7") is None

    @pytest.mark.asyncio
    async def test_get_pending_malformed_discarded(self):
        """Unparseable entries are deleted and treated as no pending input."""
        with patch.object(pending_input_cache.cache, 'is_cache_available', return_value=True):
            with patch.object(pending_input_cache.cache, 'get_json', new_callable=AsyncMock, return_value={'kind': "bogus"}):
                with patch.object(pending_input_cache.cache, 'delete', new_callable=AsyncMock, return_value=True) as mock_delete:
                    assert await pending_input_cache.get_pending("7") is None
                    mock_delete.assert_called_once_with("pending_input:7")

    @pytest.mark.asyncio
    async def test_pop_pending_clears(self):
        cached = {'user_id': "9", 'kind': "coin_info", 'created_at': "2024-01-01T00:00:00+00:00"}
        with patch.object(pending_input_cache.cache, 'is_cache_available', return_value=True):
            with patch.object(pending_input_cache.cache, 'get_json', new_callable=AsyncMock, return_value=cached):
                with patch.object(pending_input_cache.cache, 'delete', new_callable=AsyncMock, return_value=True) as mock_delete:
                    pending = await pending_input_cache.pop_pending("9")

                    assert pending.kind == PendingInputKind.COIN_INFO
                    mock_delete.assert_called_once_with("pending_input:9")

    @pytest.mark.asyncio
    async def test_users_are_isolated(self):
        """Each user has an independent key."""
        with patch.object(pending_input_cache.cache, 'is_cache_available', return_value=True):
            with patch.object(pending_input_cache.cache, 'delete', new_callable=AsyncMock, return_value=True) as mock_delete:
                await pending_input_cache.clear_pending("1")
                await pending_input_cache.clear_pending("2")

                keys = [c[0][0] for c in mock_delete.call_args_list]
                assert keys == ["pending_input:1", "pending_input:2"]

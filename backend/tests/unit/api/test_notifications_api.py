"""
Unit Tests for Notification API Endpoints
"""
import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient


class TestNotificationsApi:

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get('/api/v1/notifications')

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_and_list(self, auth_client: AsyncClient):
        created = await auth_client.post('/api/v1/notifications', json={
            'title': 'Report ready',
            'message': 'Weekly health report generated',
            'type': 'success',
        })
        listed = await auth_client.get('/api/v1/notifications')

        assert created.status_code == 201
        assert created.json()['data']['type'] == 'success'
        assert listed.json()['pagination']['total'] == 1

    @pytest.mark.asyncio
    async def test_create_invalid_type(self, auth_client: AsyncClient):
        response = await auth_client.post('/api/v1/notifications', json={
            'title': 't', 'message': 'm', 'type': 'urgent',
        })

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_create_missing_fields(self, auth_client: AsyncClient):
        response = await auth_client.post('/api/v1/notifications', json={'title': 't'})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_sync_alerts_on_list(self, auth_client: AsyncClient, make_alert):
        alert = await make_alert()

        plain = await auth_client.get('/api/v1/notifications')
        synced = await auth_client.get('/api/v1/notifications', params={'sync_alerts': 'true'})

        assert plain.json()['data'] == []
        assert synced.json()['data'][0]['alert_id'] == alert.id

    @pytest.mark.asyncio
    async def test_unread_count_and_mark_read(self, auth_client: AsyncClient, make_notification):
        first = await make_notification()
        await make_notification()

        before = await auth_client.get('/api/v1/notifications/unread-count')
        marked = await auth_client.patch(f'/api/v1/notifications/{first.id}/read')
        after_one = await auth_client.get('/api/v1/notifications/unread-count')
        await auth_client.patch('/api/v1/notifications/mark-all-read')
        after_all = await auth_client.get('/api/v1/notifications/unread-count')

        assert before.json()['data']['count'] == 2
        assert marked.json()['data']['read'] is True
        assert after_one.json()['data']['count'] == 1
        assert after_all.json()['data']['count'] == 0

    @pytest.mark.asyncio
    async def test_delete(self, auth_client: AsyncClient, make_notification):
        notification = await make_notification()

        response = await auth_client.delete(f'/api/v1/notifications/{notification.id}')
        missing = await auth_client.get(f'/api/v1/notifications/{notification.id}')

        assert response.status_code == 200
        assert missing.status_code == 404
        assert missing.json()['code'] == 'NOTIFICATION_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_clear_old(self, auth_client: AsyncClient, make_notification):
        await make_notification(created_at=datetime.utcnow() - timedelta(days=3))
        await make_notification()

        response = await auth_client.delete('/api/v1/notifications', params={'days_to_keep': 1})

        assert response.json()['data'] == {'removed': 1}

    @pytest.mark.asyncio
    async def test_window(self, auth_client: AsyncClient, make_notification):
        for _ in range(4):
            await make_notification()

        response = await auth_client.get('/api/v1/notifications/window', params={
            'scroll_top': 0, 'row_height': 40, 'visible_rows': 10,
        })

        assert len(response.json()['data']) == 4
        assert response.json()['window']['end_index'] == 4

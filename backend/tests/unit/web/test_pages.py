"""
Unit Tests for the server-rendered pages and table fragments
"""
import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient
from markupsafe import escape

from safedrive.core.config import settings
from safedrive.models import RiskLevel

TEST_PASSWORD = 'testpassword123'


class TestPageAuth:
    """Anonymous visitors are sent to the login page"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize('path', ['/', '/alerts', '/drivers', '/notifications', '/health', '/attendance'])
    async def test_redirects_to_login(self, client: AsyncClient, path):
        response = await client.get(path)

        assert response.status_code == 303
        assert response.headers['location'] == f'/login?from={path}'

    @pytest.mark.asyncio
    async def test_login_page(self, client: AsyncClient):
        response = await client.get('/login', params={'from': '/alerts'})

        assert response.status_code == 200
        assert 'name="next_path" value="/alerts"' in response.text

    @pytest.mark.asyncio
    async def test_login_page_when_signed_in(self, auth_client: AsyncClient):
        response = await auth_client.get('/login', params={'from': '/drivers'})

        assert response.status_code == 303
        assert response.headers['location'] == '/drivers'

    @pytest.mark.asyncio
    async def test_login_form_success(self, client: AsyncClient, test_user):
        response = await client.post('/login', data={
            'email': test_user.email,
            'password': TEST_PASSWORD,
            'next_path': '/alerts',
        })

        assert response.status_code == 303
        assert response.headers['location'] == '/alerts'
        assert response.cookies.get(settings.AUTH_COOKIE_NAME)

    @pytest.mark.asyncio
    async def test_login_form_ignores_offsite_next(self, client: AsyncClient, test_user):
        response = await client.post('/login', data={
            'email': test_user.email,
            'password': TEST_PASSWORD,
            'next_path': '//evil.example.com',
        })

        assert response.headers['location'] == '/'

    @pytest.mark.asyncio
    async def test_login_form_bad_password(self, client: AsyncClient, test_user):
        response = await client.post('/login', data={
            'email': test_user.email,
            'password': 'wrong',
        })

        assert response.status_code == 401
        assert 'Invalid credentials' in response.text

    @pytest.mark.asyncio
    async def test_login_form_missing_fields(self, client: AsyncClient):
        response = await client.post('/login', data={'email': 'a@b.com'})

        assert response.status_code == 400
        assert 'Email and password are required' in response.text

    @pytest.mark.asyncio
    async def test_logout(self, auth_client: AsyncClient):
        response = await auth_client.post('/logout')

        assert response.status_code == 303
        assert response.headers['location'] == '/login'
        assert 'Max-Age=0' in response.headers['set-cookie']


class TestPages:

    @pytest.mark.asyncio
    async def test_dashboard(self, auth_client: AsyncClient, make_alert, test_user):
        await make_alert(title='Oxygen dip on route 7')

        response = await auth_client.get('/')

        assert response.status_code == 200
        assert 'Overview' in response.text
        assert 'Oxygen dip on route 7' in response.text
        assert str(escape(test_user.name)) in response.text

    @pytest.mark.asyncio
    async def test_alerts_table_renders_first_window_only(self, auth_client: AsyncClient, make_alert):
        now = datetime.utcnow()
        for i in range(30):
            await make_alert(title=f'Alert #{i:02d}', created_at=now - timedelta(minutes=i))

        response = await auth_client.get('/alerts')
        html = response.text

        assert response.status_code == 200
        assert 'id="alerts-table"' in html
        assert 'data-total="30"' in html
        assert f'height: {30 * settings.TABLE_ROW_HEIGHT}px' in html
        assert html.count('data-index=') == settings.TABLE_VISIBLE_ROWS + 1
        assert 'Alert #00' in html
        assert 'Alert #29' not in html

    @pytest.mark.asyncio
    async def test_empty_table(self, auth_client: AsyncClient):
        response = await auth_client.get('/drivers')

        assert response.status_code == 200
        assert 'Nothing to show yet.' in response.text

    @pytest.mark.asyncio
    async def test_notifications_table(self, auth_client: AsyncClient, make_notification):
        await make_notification(title='Shift summary', action_url='/alerts')

        response = await auth_client.get('/notifications')

        assert '<a href="/alerts">Shift summary</a>' in response.text

    @pytest.mark.asyncio
    async def test_health_reports_table(self, auth_client: AsyncClient, make_driver, make_health_report):
        driver = await make_driver(name='Imran Sheikh')
        await make_health_report(driver, blood_pressure_high=150, blood_pressure_low=96, risk_level=RiskLevel.HIGH)

        response = await auth_client.get('/health')
        html = response.text

        assert response.status_code == 200
        assert 'id="health-table"' in html
        assert 'Imran Sheikh' in html
        assert '150/96' in html
        assert '<span class="badge badge--error">HIGH</span>' in html

    @pytest.mark.asyncio
    async def test_attendance_table(self, auth_client: AsyncClient, make_driver, make_attendance):
        driver = await make_driver(name='Lakshmi Menon')
        await make_attendance(driver, working_hours=7.5)

        response = await auth_client.get('/attendance')
        html = response.text

        assert response.status_code == 200
        assert 'id="attendance-table"' in html
        assert 'Lakshmi Menon' in html
        assert '7.5 h' in html
        assert 'Present' in html


class TestRowsFragment:

    @pytest.mark.asyncio
    async def test_slice_for_scroll_position(self, auth_client: AsyncClient, make_driver):
        for _ in range(30):
            await make_driver()

        response = await auth_client.get('/ui/drivers/rows', params={
            'scroll_top': 205, 'row_height': 40, 'visible_rows': 5,
        })

        assert response.status_code == 200
        assert response.headers['x-window-start'] == '5'
        assert response.headers['x-window-end'] == '11'
        assert response.headers['x-window-total'] == '30'
        assert 'translateY(200px)' in response.text
        assert response.text.count('data-index=') == 6
        assert 'data-index="5"' in response.text
        assert 'data-index="10"' in response.text

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get('/ui/alerts/rows')

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_table(self, auth_client: AsyncClient):
        response = await auth_client.get('/ui/reports/rows')

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_geometry(self, auth_client: AsyncClient):
        response = await auth_client.get('/ui/alerts/rows', params={'row_height': 0})

        assert response.status_code == 422

    @pytest.mark.asyncio
    @pytest.mark.parametrize('path', [
        '/ui/alerts/rows',
        '/api/v1/drivers/window',
        '/api/v1/notifications/window',
    ])
    async def test_infinite_scroll_offset_rejected(self, auth_client: AsyncClient, path):
        response = await auth_client.get(path, params={'scroll_top': 'inf'})

        assert response.status_code == 422

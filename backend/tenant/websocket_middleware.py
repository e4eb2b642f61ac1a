"""
WebSocket Tenant Middleware for Django Channels.

Resolves tenant from the staff JWT cookie and adds it to the WebSocket scope,
so consumers can read self.scope['tenant'] the way HTTP views read
request.tenant.
"""
import logging
from http.cookies import SimpleCookie

from channels.db import database_sync_to_async
from django.conf import settings
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from .models import Tenant

logger = logging.getLogger(__name__)


class TenantWebSocketMiddleware:
    """
    ASGI middleware to add tenant context to WebSocket connections.

    Unlike the HTTP middleware, the token signature is verified here: there
    is no later DRF authentication step on a socket.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        # Only process WebSocket connections
        if scope['type'] != 'websocket':
            return await self.app(scope, receive, send)

        scope = dict(scope)
        scope['tenant'] = await self.get_tenant_from_jwt(scope)

        if scope['tenant']:
            logger.info(f"TenantWebSocketMiddleware: tenant {scope['tenant'].slug} for WebSocket connection")
        else:
            logger.warning("TenantWebSocketMiddleware: No tenant found for WebSocket connection")

        return await self.app(scope, receive, send)

    def get_access_token(self, scope):
        headers = dict(scope.get('headers', []))
        cookie_header = headers.get(b'cookie', b'').decode('utf-8')
        if not cookie_header:
            return None

        cookies = SimpleCookie()
        cookies.load(cookie_header)
        morsel = cookies.get(settings.SIMPLE_JWT.get('AUTH_COOKIE'))
        return morsel.value if morsel else None

    async def get_tenant_from_jwt(self, scope):
        access_token = self.get_access_token(scope)
        if not access_token:
            return None

        try:
            token = AccessToken(access_token)
        except TokenError as e:
            logger.debug(f"TenantWebSocketMiddleware: rejected token: {e}")
            return None

        tenant_id = token.get('tenant_id')
        if not tenant_id:
            return None

        return await self.lookup_tenant(tenant_id)

    @database_sync_to_async
    def lookup_tenant(self, tenant_id):
        return Tenant.objects.filter(id=tenant_id, is_active=True).first()

"""
Commerce platform client.

Only the script-tag registration the embed needs is implemented; the store's
access token comes from the OAuth install flow, which lives outside this app.
"""
import logging

import httpx
from django.conf import settings

from core.exceptions import UpstreamError

logger = logging.getLogger('surveys')


class ScriptTagPublisher:
    def __init__(self, api_version=None, timeout=10.0, transport=None):
        self.api_version = api_version or getattr(settings, 'SHOPIFY_API_VERSION', '2024-01')
        self.timeout = timeout
        self.transport = transport

    def endpoint(self, shop_domain):
        return f"https://{shop_domain}/admin/api/{self.api_version}/script_tags.json"

    async def publish(self, store, script_url):
        """Registers ``script_url`` on the storefront and returns the script tag."""
        payload = {
            'script_tag': {
                'event': 'onload',
                'src': script_url,
                'display_scope': 'all',
            }
        }
        headers = {
            'X-Shopify-Access-Token': store['accessToken'],
            'Content-Type': 'application/json',
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.endpoint(store['shopDomain']), json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                f"Script tag publish rejected for {store['shopDomain']}: "
                f"HTTP {exc.response.status_code}"
            )
            raise UpstreamError('Failed to publish survey', detail=exc.response.text)
        except httpx.HTTPError as exc:
            logger.error(f"Script tag publish failed for {store['shopDomain']}: {exc}")
            raise UpstreamError('Failed to publish survey', detail=str(exc))

        script_tag = response.json().get('script_tag') or {}
        logger.info(f"Script tag {script_tag.get('id')} registered on {store['shopDomain']}")
        return script_tag

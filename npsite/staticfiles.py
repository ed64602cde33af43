from __future__ import annotations

from fastapi.staticfiles import StaticFiles

# Short cache for pages, long cache for fingerprint-free assets under /assets.
PAGE_CACHE_CONTROL = "public, max-age=300"
ASSET_CACHE_CONTROL = "public, max-age=86400"


class CachedStaticFiles(StaticFiles):
    def __init__(self, *args, cache_control: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.cache_control = cache_control

    def _cache_header(self, path: str) -> str:
        if self.cache_control:
            return self.cache_control
        if path.startswith("assets/"):
            return ASSET_CACHE_CONTROL
        return PAGE_CACHE_CONTROL

    async def get_response(self, path: str, scope):
        response = await super().get_response(path, scope)
        if response.status_code == 200:
            response.headers.setdefault("Cache-Control", self._cache_header(path))
        return response

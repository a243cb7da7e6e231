import httpx
from app.config import settings


class PowerBIHttpClient:
    _client: httpx.Client = None

    @classmethod
    def get_client(cls) -> httpx.Client:
        if cls._client is None:
            cls._client = httpx.Client(timeout=settings.powerbi_http_timeout)
        return cls._client

    @classmethod
    def close(cls):
        if cls._client is not None:
            cls._client.close()
            cls._client = None


def get_http_client() -> httpx.Client:
    return PowerBIHttpClient.get_client()

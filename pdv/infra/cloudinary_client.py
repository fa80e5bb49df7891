from __future__ import annotations
import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
import httpx
from cloudinary.utils import api_sign_request
from pdv.core.config import settings
from pdv.core.logging import get_logger

logger = get_logger("cloudinary")


class CloudinaryError(RuntimeError):
    def __init__(self, status_code: int, message: str, details: Optional[dict] = None):
        super().__init__(f"[Cloudinary {status_code}] {message}")
        self.status_code = status_code
        self.message = message
        self.details = details or {}


@dataclass(frozen=True)
class UploadedImage:
    url: str
    public_id: str


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """Assinatura SHA-1 da API assinada do Cloudinary (parâmetros ordenados + secret)."""
    return api_sign_request(params, api_secret)


def _error_details(resp: httpx.Response) -> Dict[str, Any]:
    try:
        return resp.json()
    except ValueError:
        return {"raw": resp.text[:500]}


class CloudinaryClient:
    """Upload e remoção de imagens no Cloudinary."""

    def __init__(
        self,
        *,
        cloud_name: Optional[str] = None,
        upload_preset: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retries: int = 2,
        backoff_base: float = 0.25,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name or settings.CLOUDINARY_CLOUD_NAME
        self.upload_preset = upload_preset or settings.CLOUDINARY_UPLOAD_PRESET
        self.api_key = api_key or settings.CLOUDINARY_API_KEY
        self.api_secret = api_secret or settings.CLOUDINARY_API_SECRET
        self.base_url = (base_url or settings.CLOUDINARY_API_URL).rstrip("/")
        self.timeout = timeout or settings.CLOUDINARY_TIMEOUT
        self.retries = retries
        self.backoff_base = backoff_base
        self._transport = transport

    def _url(self, action: str) -> str:
        return f"{self.base_url}/{self.cloud_name}/image/{action}"

    async def _post_with_retries(
        self,
        url: str,
        *,
        data: Dict[str, Any],
        files: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        last_exc: Optional[Exception] = None
        resp: Optional[httpx.Response] = None
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            while attempt <= self.retries:
                try:
                    resp = await client.post(url, data=data, files=files)
                    # 2xx ok / 4xx: não adianta tentar de novo
                    if resp.status_code < 500:
                        return resp
                    last_exc = None
                except (httpx.TimeoutException, httpx.NetworkError) as exc:
                    last_exc = exc
                # 5xx ou erro de rede: tenta de novo com backoff
                attempt += 1
                if attempt > self.retries:
                    break
                await asyncio.sleep(self.backoff_base * (2 ** (attempt - 1)))
        if last_exc:
            raise last_exc
        assert resp is not None
        return resp

    async def upload_image(
        self, content: bytes, filename: str, folder: str = "categories"
    ) -> UploadedImage:
        data = {"upload_preset": self.upload_preset, "folder": folder}
        files = {"file": (filename, content)}
        resp = await self._post_with_retries(self._url("upload"), data=data, files=files)

        if not (200 <= resp.status_code < 300):
            raise CloudinaryError(resp.status_code, "Erro ao enviar imagem", _error_details(resp))

        try:
            body = resp.json()
            uploaded = UploadedImage(url=body["secure_url"], public_id=body["public_id"])
        except (ValueError, KeyError) as exc:
            raise CloudinaryError(resp.status_code, "Resposta inválida do Cloudinary", {"error": str(exc)})

        logger.info("Image uploaded", folder=folder, public_id=uploaded.public_id)
        return uploaded

    async def delete_image(self, public_id: str) -> None:
        if not (self.api_key and self.api_secret):
            raise CloudinaryError(0, "Credenciais do Cloudinary ausentes para remoção")

        params: Dict[str, Any] = {"public_id": public_id, "timestamp": int(time.time())}
        data = {
            **params,
            "api_key": self.api_key,
            "signature": sign_params(params, self.api_secret),
        }
        resp = await self._post_with_retries(self._url("destroy"), data=data)

        if not (200 <= resp.status_code < 300):
            raise CloudinaryError(resp.status_code, "Erro ao remover imagem", _error_details(resp))

        result = _error_details(resp).get("result")
        if result not in ("ok", "not found"):
            raise CloudinaryError(resp.status_code, f"Remoção não confirmada: {result}")
        logger.info("Image deleted", public_id=public_id, result=result)

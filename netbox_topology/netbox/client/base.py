"""
Базовый класс NetBox клиента.

Инициализация подключения к NetBox API и общая выгрузка списков.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import pynetbox
import requests
from requests.adapters import HTTPAdapter

from ...core.exceptions import NetBoxAPIError, NetBoxConnectionError

logger = logging.getLogger(__name__)


class TimeoutHTTPAdapter(HTTPAdapter):
    """HTTPAdapter с таймаутом по умолчанию для всех запросов pynetbox."""

    def __init__(self, *args, timeout: int = 30, **kwargs):
        self.timeout = timeout
        super().__init__(*args, **kwargs)

    def send(self, request, **kwargs):
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = self.timeout
        return super().send(request, **kwargs)


class NetBoxClientBase:
    """
    Базовый класс для NetBox клиента.

    Отвечает за подключение и перевод ошибок pynetbox/requests
    в NetBoxAPIError / NetBoxConnectionError.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        ssl_verify: bool = True,
        timeout: int = 30,
    ):
        """
        Инициализация клиента NetBox.

        Args:
            url: URL NetBox сервера (или env NETBOX_URL)
            token: API токен (или env NETBOX_TOKEN)
            ssl_verify: Проверять SSL сертификат
            timeout: Таймаут HTTP запроса, секунды

        Raises:
            ValueError: URL или токен не указаны
        """
        self.url = url or os.environ.get("NETBOX_URL")
        self._token = token or os.environ.get("NETBOX_TOKEN")

        if not self.url:
            raise ValueError("NetBox URL не указан. Укажите url или установите NETBOX_URL")
        if not self._token:
            raise ValueError("NetBox токен не указан. Укажите token или установите NETBOX_TOKEN")

        self.api = pynetbox.api(self.url, token=self._token)

        session = requests.Session()
        session.verify = ssl_verify
        adapter = TimeoutHTTPAdapter(timeout=timeout)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        self.api.http_session = session

        logger.info(f"NetBox клиент инициализирован: {self.url}")

    def _list(self, app: str, endpoint: str, **filters: Any) -> List[Dict[str, Any]]:
        """
        Выгружает все записи endpoint (pynetbox сам проходит по страницам).

        Args:
            app: Приложение NetBox (dcim, ipam, vpn, wireless, tenancy)
            endpoint: Endpoint (devices, cables, ...)
            **filters: Фильтры API

        Returns:
            List[Dict]: Записи как словари

        Raises:
            NetBoxAPIError: NetBox вернул ошибку
            NetBoxConnectionError: NetBox недоступен
        """
        name = f"{app}.{endpoint}"
        api_endpoint = getattr(getattr(self.api, app), endpoint)
        try:
            records = api_endpoint.filter(**filters) if filters else api_endpoint.all()
            result = [dict(record) for record in records]
        except pynetbox.RequestError as e:
            status = getattr(e.req, "status_code", None)
            raise NetBoxAPIError(
                f"Ошибка API {name}: {e.error}",
                url=self.url,
                status_code=status,
                endpoint=name,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetBoxConnectionError(f"NetBox недоступен ({name}): {e}", url=self.url) from e

        logger.debug(f"Получено {name}: {len(result)}")
        return result

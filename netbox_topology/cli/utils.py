"""
Общие утилиты CLI: источник снапшота, клиент NetBox, фильтры.
"""

import logging
from typing import Optional

from ..config import Config
from ..core.constants import EdgeKind
from ..core.exceptions import ConfigError, SnapshotError, is_retryable
from ..core.snapshot import Snapshot
from ..netbox import NetBoxClient, SnapshotFetcher

logger = logging.getLogger(__name__)


def create_client(config: Config) -> NetBoxClient:
    """NetBoxClient из секции netbox конфигурации."""
    try:
        return NetBoxClient(
            url=config.netbox.url,
            token=config.netbox.token,
            ssl_verify=config.netbox.verify_ssl,
            timeout=config.netbox.timeout,
        )
    except ValueError as e:
        raise ConfigError(str(e), config_file=config.config_file, key="netbox") from e


def fetch_snapshot(config: Config) -> Snapshot:
    """
    Выгружает снапшот из NetBox.

    При недоступности NetBox выгрузка повторяется fetch.retries раз.

    Raises:
        SnapshotError: Снапшот не собран целиком
    """
    fetcher = SnapshotFetcher(create_client(config), max_workers=config.fetch.max_workers)
    attempts = config.fetch.retries + 1
    for attempt in range(1, attempts + 1):
        try:
            return fetcher.fetch(config.fetch.record_types)
        except SnapshotError as e:
            if attempt == attempts or not is_retryable(e):
                raise
            logger.warning(f"Выгрузка не удалась ({e}), попытка {attempt + 1}/{attempts}")


def load_snapshot(args, config: Config) -> Snapshot:
    """Снапшот из --snapshot FILE, иначе из NetBox."""
    path = getattr(args, "snapshot", None)
    if path:
        logger.info(f"Снапшот из файла: {path}")
        return Snapshot.from_file(path)
    logger.info(f"Снапшот из NetBox: {config.netbox.url}")
    return fetch_snapshot(config)


def parse_kind(value: Optional[str]) -> Optional[EdgeKind]:
    """--kind physical → EdgeKind.PHYSICAL."""
    return EdgeKind(value) if value else None

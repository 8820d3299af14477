"""
Команда fetch.

Выгружает снапшот из NetBox и сохраняет в файл для офлайн-запусков.
"""

import logging

from ..utils import fetch_snapshot

logger = logging.getLogger(__name__)


def cmd_fetch(args, ctx, config) -> None:
    """Выгрузка снапшота в JSON/YAML файл."""
    snapshot = fetch_snapshot(config)

    path = args.file or ctx.get_output_path("snapshot.json")
    snapshot.to_file(path)

    counts = snapshot.counts()
    print(f"Снапшот сохранён: {path}")
    for record_type, count in counts.items():
        if count:
            print(f"  {record_type}: {count}")

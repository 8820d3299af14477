"""
NetBox Client - выгрузка записей NetBox API.

Модуль разбит на компоненты:
    - base.py     - базовый класс, подключение, перевод ошибок
    - dcim.py     - устройства, интерфейсы, порты, кабели, локации, сайты
    - ipam.py     - VLAN, группы VLAN, IP, префиксы, диапазоны
    - vpn.py      - L2VPN и терминации
    - wireless.py - WLAN и группы WLAN
    - tenancy.py  - тенанты
    - main.py     - NetBoxClient (объединяет все mixins)
"""

from .main import NetBoxClient
from .base import NetBoxClientBase

__all__ = [
    "NetBoxClient",
    "NetBoxClientBase",
]

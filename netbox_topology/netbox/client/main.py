"""
NetBox Client - объединяет все mixins.
"""

from .base import NetBoxClientBase
from .dcim import DCIMMixin
from .ipam import IPAMMixin
from .vpn import VPNMixin
from .wireless import WirelessMixin
from .tenancy import TenancyMixin


class NetBoxClient(
    DCIMMixin,
    IPAMMixin,
    VPNMixin,
    WirelessMixin,
    TenancyMixin,
    NetBoxClientBase,
):
    """
    Клиент выгрузки записей NetBox через pynetbox (только чтение).

    Attributes:
        url: URL NetBox сервера
        api: Объект pynetbox.api

    Example:
        client = NetBoxClient(url="https://netbox.example.com", token="xxx")

        for cable in client.get_cables():
            print(cable["id"], cable["a_terminations"])
    """

    pass

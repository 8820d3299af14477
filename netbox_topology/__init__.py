"""
NetBox Topology — разрешение топологии из данных NetBox.

Превращает снапшот записей NetBox (устройства, интерфейсы, порты
патч-панелей, кабели, VLAN, L2VPN, WLAN, тенанты) в граф со сквозными
физическими и логическими связями.

Пример использования:
    from netbox_topology import Snapshot, TopologyEngine

    result = TopologyEngine().run(Snapshot.from_file("snapshot.json"))
    for edge in result.graph.edges(kind="physical"):
        print(edge.endpoints, edge.sources)
"""

from .core.snapshot import Snapshot
from .core.engine import TopologyEngine, ResolutionResult
from .core.graph import TopologyGraph

__version__ = "1.0.0"

__all__ = ["Snapshot", "TopologyEngine", "ResolutionResult", "TopologyGraph", "__version__"]

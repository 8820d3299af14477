"""
Движок разрешения топологии.

Один запуск на один неизменяемый снапшот:

    Snapshot → EntityNormalizer → {TenantResolver, PhysicalLinkBuilder}
             → LogicalOverlayBuilder → TopologyGraph

Определение тенантов и проход кабелей не зависят друг от друга и при
parallel=True выполняются в двух потоках; каждый пишет свой результат.

Пример использования:
    engine = TopologyEngine(parallel=True)
    result = engine.run(Snapshot.from_file("snapshot.json"))

    print(result.graph.stats())
    for link in result.unresolved:
        print(link.cable_ids, link.reason.value)
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .domain import (
    EntityNormalizer,
    LogicalOverlayBuilder,
    NormalizedEntities,
    PhysicalLinkBuilder,
    PhysicalLinks,
    TenantResolver,
    UnresolvedLink,
)
from .graph import TopologyGraph
from .logging import OperationLog, get_logger
from .models import Diagnostic
from .snapshot import Snapshot

logger = get_logger(__name__)


@dataclass
class ResolutionResult:
    """
    Результат запуска.

    Attributes:
        graph: Граф топологии
        diagnostics: Замечания нормализатора (аномалии данных)
        unresolved: Кабели и цепочки без ребра
        entities: Нормализованные сущности
        device_tenants: Эффективные тенанты устройств
        operation: Лог операции (длительность, статус)
    """
    graph: TopologyGraph
    diagnostics: List[Diagnostic] = field(default_factory=list)
    unresolved: List[UnresolvedLink] = field(default_factory=list)
    entities: Optional[NormalizedEntities] = None
    device_tenants: Dict[int, Optional[int]] = field(default_factory=dict)
    operation: Optional[OperationLog] = None

    def summary(self) -> Dict[str, Any]:
        """Краткая статистика запуска."""
        reasons: Dict[str, int] = {}
        for link in self.unresolved:
            reasons[link.reason.value] = reasons.get(link.reason.value, 0) + 1
        severities: Dict[str, int] = {}
        for diag in self.diagnostics:
            severities[diag.severity.value] = severities.get(diag.severity.value, 0) + 1
        return {
            **self.graph.stats(),
            "unresolved": reasons,
            "diagnostics": severities,
            "tenants": len(self.graph.tenants()),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary(),
            "graph": self.graph.to_dict(),
            "anomalies": [d.to_dict() for d in self.diagnostics],
            "unresolved": [link.to_dict() for link in self.unresolved],
        }


class TopologyEngine:
    """
    Оркестратор одного запуска разрешения.

    Состояния между запусками не хранит: каждый run() строит всё заново.
    """

    def __init__(self, parallel: bool = True, default_tenant: Optional[int] = None):
        """
        Args:
            parallel: Тенанты и физический слой в двух потоках
            default_tenant: Тенант для устройств без тенанта
        """
        self.parallel = parallel
        self.default_tenant = default_tenant

    def run(self, snapshot: Snapshot) -> ResolutionResult:
        """
        Разрешает топологию снапшота.

        Ошибки отдельных записей и кабелей в исключения не превращаются:
        они попадают в diagnostics и unresolved.
        """
        op = OperationLog(operation="resolve").start()
        logger.info(f"Разрешение топологии: {snapshot!r}")
        try:
            entities = EntityNormalizer().normalize(snapshot)
            device_tenants, physical = self._resolve_independent(entities)
            overlay = LogicalOverlayBuilder(entities)
            graph = TopologyGraph.build(
                entities, device_tenants, physical.edges, overlay.build(), l2vpn_vteps=overlay.vteps(),
            )
        except Exception as e:
            op.failure(str(e))
            op.log(logger)
            raise

        result = ResolutionResult(
            graph=graph,
            diagnostics=list(entities.diagnostics),
            unresolved=list(physical.unresolved),
            entities=entities,
            device_tenants=device_tenants,
            operation=op,
        )
        stats = graph.stats()
        op.success(
            nodes=sum(stats["nodes"].values()),
            edges=sum(stats["edges"].values()),
            unresolved=len(result.unresolved),
            diagnostics=len(result.diagnostics),
        )
        op.log(logger)
        return result

    def _resolve_independent(self, entities: NormalizedEntities):
        """Тенанты устройств и физический слой."""
        tenants = TenantResolver(entities)
        builder = PhysicalLinkBuilder(entities)

        if not self.parallel:
            return tenants.resolve_all(self.default_tenant), builder.build()

        results: Dict[str, Any] = {}
        with ThreadPoolExecutor(max_workers=2) as executor:
            futures = {
                executor.submit(tenants.resolve_all, self.default_tenant): "tenants",
                executor.submit(builder.build): "physical",
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()

        physical: PhysicalLinks = results["physical"]
        return results["tenants"], physical

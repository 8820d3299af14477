"""
Domain logic построения физических связей.

Каждый кабель даёт ровно одно физическое ребро (интерфейс ↔ интерфейс)
или ровно одну запись в отчёте о неразрешённых связях. Цепочка через
патч-панели — одна связь: все её кабели помечаются покрытыми и не
обрабатываются повторно.

Исключение — мультиплексированный trunk (rear ↔ rear): его проходят
несколько цепочек с разными позициями, и он указан в каждом ребре.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Set, Tuple

from ..constants import EntityKind, UnresolvedReason
from .normalizer import NormalizedEntities
from .passthrough import ChainResolution, PassThroughResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhysicalEdge:
    """
    Неориентированная связь двух интерфейсов.

    a < b всегда, чтобы одинаковые связи сравнивались одинаково.
    """
    a: int
    b: int
    cable_ids: Tuple[int, ...]


@dataclass(frozen=True)
class UnresolvedLink:
    """
    Кабель или цепочка, не давшая ребра.

    Attributes:
        cable_ids: Кабели цепочки
        reason: Причина
        side: Сторона, на которой проход не удался ("" для self-loop)
        detail: Пояснение
    """
    cable_ids: Tuple[int, ...]
    reason: UnresolvedReason
    side: str = ""
    detail: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cable_ids": list(self.cable_ids),
            "reason": self.reason.value,
            "side": self.side,
            "detail": self.detail,
        }


@dataclass
class PhysicalLinks:
    """Результат построения физического слоя."""
    edges: List[PhysicalEdge] = field(default_factory=list)
    unresolved: List[UnresolvedLink] = field(default_factory=list)


class PhysicalLinkBuilder:
    """
    Строит физические связи из кабелей.

    Порядок обработки детерминирован: сначала кабели, у которых хотя бы
    одна сторона — интерфейс, затем остальные; внутри групп — по ID.
    Так цепочка всегда собирается от своего конца, а не с середины.

    Example:
        builder = PhysicalLinkBuilder(entities)
        links = builder.build()
        print(len(links.edges), len(links.unresolved))
    """

    def __init__(self, entities: NormalizedEntities, resolver: Optional[PassThroughResolver] = None):
        self.entities = entities
        self.resolver = resolver or PassThroughResolver(entities)

    def build(self) -> PhysicalLinks:
        """Разрешает все кабели снапшота."""
        links = PhysicalLinks()
        covered: Set[int] = set()

        for cable_id in self._ordered_cables():
            if cable_id in covered:
                continue

            a_side = self.resolver.resolve(cable_id, "A")
            b_side = self.resolver.resolve(cable_id, "B")
            chain = tuple(reversed(a_side.cable_ids[1:])) + (cable_id,) + b_side.cable_ids[1:]

            link = self._link(chain, a_side, b_side)
            if isinstance(link, PhysicalEdge):
                links.edges.append(link)
            else:
                # Кабель, уже вошедший в другую запись (общий rear port), второй раз не пишется
                own = tuple(cid for cid in link.cable_ids if cid not in covered)
                links.unresolved.append(replace(link, cable_ids=own))
            covered.update(chain)

        logger.info(
            f"Физический слой: кабелей={len(self.entities.cables)}, "
            f"рёбер={len(links.edges)}, неразрешённых={len(links.unresolved)}"
        )
        return links

    def _ordered_cables(self) -> List[int]:
        def has_interface(cable_id: int) -> bool:
            cable = self.entities.cables[cable_id]
            return EntityKind.INTERFACE in (cable.a_termination.kind, cable.b_termination.kind)

        return sorted(self.entities.cables, key=lambda cid: (not has_interface(cid), cid))

    def _link(self, chain: Tuple[int, ...], a_side: ChainResolution, b_side: ChainResolution):
        for side in (a_side, b_side):
            if not side.resolved:
                return UnresolvedLink(chain, side.reason, side.side, side.detail)

        if a_side.endpoint == b_side.endpoint:
            return UnresolvedLink(
                chain,
                UnresolvedReason.SELF_LOOP,
                detail=f"обе стороны на interface:{a_side.endpoint}",
            )

        a, b = sorted((a_side.endpoint, b_side.endpoint))
        return PhysicalEdge(a=a, b=b, cable_ids=chain)

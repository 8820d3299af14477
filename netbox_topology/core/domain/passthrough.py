"""
Domain logic прохода через патч-панели.

Кабель может заканчиваться на front/rear port патч-панели. Чтобы найти
реальный интерфейс на другом конце, идём наружу, чередуя два вида шагов:

    cable hop:   порт → кабель → терминация на дальнем конце
    pairing hop: front port ↔ rear port внутри одной панели

Правила:
- Интерфейс, достигнутый кабелем → цепочка разрешена
- Front port → его rear port; rear_port_position кладётся в стек позиций
- Rear port → front port с позицией из стека; без позиции кандидаты —
  все front ports этого rear port; если их несколько, остаются только
  подключённые кабелем; больше одного — ambiguous, ни одного — dangling
- Порт после pairing hop без кабеля → dangling
- Интерфейс, достигнутый с неиспользованной позицией, а rear port этой
  позиции разветвляется на несколько подключённых front ports → ambiguous
  (обратный проход от интерфейса тоже ambiguous, исход не зависит от стороны)
- Повторный заход в порт → cycle
- Ссылка на отсутствующую в снапшоте запись → missing

Обход итеративный, ограничен множеством посещённых портов.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..constants import EntityKind, UnresolvedReason
from ..exceptions import ResolutionError
from ..models import Ref
from .normalizer import NormalizedEntities

logger = logging.getLogger(__name__)

HOP_CABLE = "cable"
HOP_PAIRING = "pairing"


@dataclass(frozen=True)
class ChainResolution:
    """
    Результат прохода от одной стороны кабеля.

    Attributes:
        cable_id: Кабель, с которого начат проход
        side: Сторона кабеля ("A" или "B")
        endpoint: ID интерфейса на конце цепочки (None если не разрешена)
        reason: Причина неудачи (None если разрешена)
        cable_ids: Пройденные кабели по порядку (первый — стартовый)
        hops: Пройденные порты по порядку
        detail: Пояснение для отчёта
    """
    cable_id: int
    side: str
    endpoint: Optional[int] = None
    reason: Optional[UnresolvedReason] = None
    cable_ids: Tuple[int, ...] = ()
    hops: Tuple[Ref, ...] = ()
    detail: str = ""

    @property
    def resolved(self) -> bool:
        return self.endpoint is not None


class PassThroughResolver:
    """
    Разрешает цепочки кабелей через патч-панели.

    Example:
        resolver = PassThroughResolver(entities)
        chain = resolver.resolve(cable_id=12, side="B")
        if chain.resolved:
            print(f"Интерфейс {chain.endpoint} через кабели {chain.cable_ids}")
        else:
            print(f"Не разрешено: {chain.reason.value}")
    """

    def __init__(self, entities: NormalizedEntities):
        self.entities = entities

    def resolve(self, cable_id: int, side: str) -> ChainResolution:
        """
        Идёт от терминации стороны side кабеля cable_id наружу.

        Args:
            cable_id: ID кабеля
            side: "A" или "B"

        Returns:
            ChainResolution

        Raises:
            ResolutionError: Кабеля нет среди нормализованных или сторона неизвестна
        """
        cable = self.entities.cables.get(cable_id)
        if cable is None:
            raise ResolutionError(f"Кабель {cable_id} не найден", {"cable_id": cable_id})
        try:
            current = cable.termination(side).ref
        except ValueError as e:
            raise ResolutionError(str(e), {"cable_id": cable_id, "side": side}) from e

        cable_ids: List[int] = [cable_id]
        hops: List[Ref] = []
        visited = set()
        # (позиция, rear port), ещё не сведённые обратно на front port
        positions: List[Tuple[int, Ref]] = []
        arrived_by = HOP_CABLE

        def fail(reason: UnresolvedReason, detail: str) -> ChainResolution:
            logger.debug(f"Кабель {cable_id}/{side}: {reason.value} — {detail}")
            return ChainResolution(
                cable_id=cable_id,
                side=side,
                reason=reason,
                cable_ids=tuple(cable_ids),
                hops=tuple(hops),
                detail=detail,
            )

        while True:
            if not current.resolved or self.entities.get(current) is None:
                return fail(UnresolvedReason.MISSING, f"{current} отсутствует в снапшоте")
            if current.key in visited:
                return fail(UnresolvedReason.CYCLE, f"повторный заход в {current}")
            visited.add(current.key)
            hops.append(current)

            if current.kind == EntityKind.INTERFACE:
                for _, rear in reversed(positions):
                    front, reason, detail = self._select_front(rear, [])
                    if front is None and reason == UnresolvedReason.AMBIGUOUS:
                        return fail(reason, f"{current} на {rear} без позиции: {detail}")
                return ChainResolution(
                    cable_id=cable_id,
                    side=side,
                    endpoint=current.id,
                    cable_ids=tuple(cable_ids),
                    hops=tuple(hops),
                )

            if arrived_by == HOP_PAIRING:
                next_cable = self.entities.port_cables.get(current.key)
                if next_cable is None:
                    return fail(UnresolvedReason.DANGLING, f"{current} без кабеля")
                far = self.entities.cables[next_cable].far_side(current)
                cable_ids.append(next_cable)
                current, arrived_by = far.ref, HOP_CABLE
                continue

            if current.kind == EntityKind.FRONT_PORT:
                front = self.entities.front_ports[current.id]
                if front.rear_port is None:
                    return fail(UnresolvedReason.DANGLING, f"{current} без rear port")
                positions.append((front.rear_port_position, front.rear_port))
                current, arrived_by = front.rear_port, HOP_PAIRING
                continue

            # REAR_PORT, достигнутый кабелем
            selected, reason, detail = self._select_front(current, positions)
            if selected is None:
                return fail(reason, detail)
            current, arrived_by = selected, HOP_PAIRING

    def _select_front(
        self,
        rear: Ref,
        positions: List[Tuple[int, Ref]],
    ) -> Tuple[Optional[Ref], Optional[UnresolvedReason], str]:
        """
        Выбирает front port для pairing hop с rear port.

        Args:
            rear: Rear port, достигнутый кабелем
            positions: Стек несведённых позиций (верхняя снимается)

        Returns:
            (Ref front port, None, "") или (None, причина, пояснение)
        """
        candidates = self.entities.front_ports_by_rear.get(rear.id, ())

        if positions:
            position, _ = positions.pop()
            matched = [
                fid for fid in candidates
                if self.entities.front_ports[fid].rear_port_position == position
            ]
            if not matched:
                return None, UnresolvedReason.DANGLING, f"{rear} без front port на позиции {position}"
            return Ref(EntityKind.FRONT_PORT, matched[0]), None, ""

        if len(candidates) > 1:
            candidates = [
                fid for fid in candidates
                if (EntityKind.FRONT_PORT.value, fid) in self.entities.port_cables
            ]
            if len(candidates) > 1:
                ports = ", ".join(f"front-port:{fid}" for fid in candidates)
                return None, UnresolvedReason.AMBIGUOUS, f"{rear} разветвляется на {ports}"
        if not candidates:
            return None, UnresolvedReason.DANGLING, f"{rear} без front port"
        return Ref(EntityKind.FRONT_PORT, candidates[0]), None, ""

"""
Domain logic нормализации записей NetBox.

Превращает сырые записи снапшота (REST или GraphQL формат) в
типизированные неизменяемые сущности. Не зависит от pynetbox —
работает со словарями.

Правила:
- ID нормализуется к int ("12" → 12), дубликаты отбрасываются (первый выигрывает)
- Полиморфные поля разбираются по дискриминатору в замкнутый набор вариантов
- Ссылка на отсутствующую в снапшоте запись сохраняется как Ref(resolved=False)
- Запись без обязательного ID или с нарушенной кардинальностью отбрасывается
  с Diagnostic; остальные записи обрабатываются дальше
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from ..constants import (
    CABLE_TERMINATION_KINDS,
    L2VPN_TERMINATION_KINDS,
    EntityKind,
    RecordType,
    Severity,
    resolve_termination_type,
)
from ..exceptions import NormalizationError
from ..models import (
    TERMINATION_CLASSES,
    Cable,
    CableTermination,
    Device,
    Diagnostic,
    FrontPort,
    Interface,
    IPAddress,
    IPRange,
    L2VPN,
    L2VPNTermination,
    Location,
    Prefix,
    RearPort,
    Ref,
    Site,
    Tenant,
    Vlan,
    VlanGroup,
    WirelessLAN,
    WirelessLANGroup,
)
from ..snapshot import Snapshot

logger = logging.getLogger(__name__)

PortKey = Tuple[str, int]


@dataclass
class NormalizedEntities:
    """
    Результат нормализации: сущности по ID, индексы и диагностика.

    После normalize() только читается.

    Attributes:
        port_cables: Порт (kind, id) → ID кабеля, который на нём терминирован
        front_ports_by_rear: ID rear port → ID front ports, отсортированные по позиции
        diagnostics: Замечания по записям (отброшенные и неполные)
    """
    devices: Dict[int, Device] = field(default_factory=dict)
    interfaces: Dict[int, Interface] = field(default_factory=dict)
    front_ports: Dict[int, FrontPort] = field(default_factory=dict)
    rear_ports: Dict[int, RearPort] = field(default_factory=dict)
    cables: Dict[int, Cable] = field(default_factory=dict)
    locations: Dict[int, Location] = field(default_factory=dict)
    sites: Dict[int, Site] = field(default_factory=dict)
    vlans: Dict[int, Vlan] = field(default_factory=dict)
    vlan_groups: Dict[int, VlanGroup] = field(default_factory=dict)
    l2vpns: Dict[int, L2VPN] = field(default_factory=dict)
    wireless_lans: Dict[int, WirelessLAN] = field(default_factory=dict)
    wireless_lan_groups: Dict[int, WirelessLANGroup] = field(default_factory=dict)
    tenants: Dict[int, Tenant] = field(default_factory=dict)
    ip_addresses: Dict[int, IPAddress] = field(default_factory=dict)
    prefixes: Dict[int, Prefix] = field(default_factory=dict)
    ip_ranges: Dict[int, IPRange] = field(default_factory=dict)
    port_cables: Dict[PortKey, int] = field(default_factory=dict)
    front_ports_by_rear: Dict[int, Tuple[int, ...]] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    _BY_KIND = {
        EntityKind.DEVICE: "devices",
        EntityKind.INTERFACE: "interfaces",
        EntityKind.FRONT_PORT: "front_ports",
        EntityKind.REAR_PORT: "rear_ports",
        EntityKind.CABLE: "cables",
        EntityKind.LOCATION: "locations",
        EntityKind.SITE: "sites",
        EntityKind.VLAN: "vlans",
        EntityKind.VLAN_GROUP: "vlan_groups",
        EntityKind.L2VPN: "l2vpns",
        EntityKind.WIRELESS_LAN: "wireless_lans",
        EntityKind.WIRELESS_LAN_GROUP: "wireless_lan_groups",
        EntityKind.TENANT: "tenants",
        EntityKind.IP_ADDRESS: "ip_addresses",
    }

    def get(self, ref: Optional[Ref]) -> Any:
        """Сущность по ссылке или None (ссылки нет / не разрешена)."""
        if ref is None or not ref.resolved:
            return None
        return getattr(self, self._BY_KIND[ref.kind]).get(ref.id)

    def errors(self) -> List[Diagnostic]:
        """Только отброшенные записи."""
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    def summary(self) -> Dict[str, int]:
        """Количество сущностей по видам."""
        return {name: len(getattr(self, name)) for name in self._BY_KIND.values()}


class _RecordContext:
    """Контекст разбора одной записи: предупреждения копятся до успеха."""

    def __init__(self, record_type: RecordType, record_id: Optional[int]):
        self.record_type = record_type
        self.record_id = record_id
        self.warnings: List[Diagnostic] = []

    def error(self, message: str, field_name: str = "") -> NormalizationError:
        return NormalizationError(
            message,
            record_type=self.record_type.value,
            record_id=self.record_id,
            field=field_name or None,
        )

    def warn(self, message: str, field_name: str = "", code: str = "") -> None:
        self.warnings.append(Diagnostic(
            severity=Severity.WARNING,
            record_type=self.record_type.value,
            record_id=self.record_id,
            message=message,
            field=field_name,
            code=code,
        ))


class EntityNormalizer:
    """
    Нормализация снапшота NetBox в типизированные сущности.

    Example:
        normalizer = EntityNormalizer()
        entities = normalizer.normalize(snapshot)
        for diag in entities.diagnostics:
            print(diag.record_type, diag.record_id, diag.message)
    """

    def normalize(self, snapshot: Snapshot) -> NormalizedEntities:
        """
        Нормализует весь снапшот.

        Args:
            snapshot: Полный снапшот записей

        Returns:
            NormalizedEntities: Сущности, индексы и диагностика
        """
        self._result = NormalizedEntities()
        self._batches = self._prepare_batches(snapshot)
        self._known = self._collect_known_ids()
        self._ips_by_interface: Dict[int, List[int]] = {}

        steps: List[Tuple[RecordType, Callable, Dict[int, Any]]] = [
            (RecordType.TENANTS, self._parse_tenant, self._result.tenants),
            (RecordType.SITES, self._parse_site, self._result.sites),
            (RecordType.LOCATIONS, self._parse_location, self._result.locations),
            (RecordType.VLAN_GROUPS, self._parse_vlan_group, self._result.vlan_groups),
            (RecordType.VLANS, self._parse_vlan, self._result.vlans),
            (RecordType.WIRELESS_LAN_GROUPS, self._parse_wlan_group, self._result.wireless_lan_groups),
            (RecordType.WIRELESS_LANS, self._parse_wlan, self._result.wireless_lans),
            (RecordType.IP_ADDRESSES, self._parse_ip_address, self._result.ip_addresses),
            (RecordType.DEVICES, self._parse_device, self._result.devices),
            (RecordType.INTERFACES, self._parse_interface, self._result.interfaces),
            (RecordType.REAR_PORTS, self._parse_rear_port, self._result.rear_ports),
            (RecordType.FRONT_PORTS, self._parse_front_port, self._result.front_ports),
            (RecordType.CABLES, self._parse_cable, self._result.cables),
            (RecordType.L2VPNS, self._parse_l2vpn, self._result.l2vpns),
            (RecordType.PREFIXES, self._parse_prefix, self._result.prefixes),
            (RecordType.IP_RANGES, self._parse_ip_range, self._result.ip_ranges),
        ]
        for record_type, parse, target in steps:
            self._normalize_batch(record_type, parse, target)

        self._attach_l2vpn_terminations()
        self._attach_wlan_group_members()
        self._index_front_ports()

        result = self._result
        errors = len(result.errors())
        logger.info(
            f"Нормализация: сущностей={sum(result.summary().values())}, "
            f"отброшено={errors}, предупреждений={len(result.diagnostics) - errors}"
        )
        return result

    # ==================== ПОДГОТОВКА ====================

    def _prepare_batches(self, snapshot: Snapshot) -> Dict[RecordType, List[Dict[str, Any]]]:
        """
        Сортирует пакеты по ID и добавляет локации/сайты из вложенных объектов.

        Сортировка делает "первый выигрывает" независимым от порядка выгрузки.
        """
        batches = {rt: sorted(snapshot.get(rt), key=_sort_key) for rt in RecordType}

        # Вложенные location/site с тенантом (GraphQL) становятся отдельными записями
        for record_type, field_name in ((RecordType.LOCATIONS, "location"), (RecordType.SITES, "site")):
            present = {_safe_id(r.get("id")) for r in batches[record_type]}
            extra = {}
            for device in batches[RecordType.DEVICES]:
                nested = device.get(field_name)
                if not isinstance(nested, dict) or "tenant" not in nested:
                    continue
                nested_id = _safe_id(nested.get("id"))
                if nested_id is not None and nested_id not in present:
                    extra.setdefault(nested_id, nested)
            batches[record_type].extend(extra[k] for k in sorted(extra))
        return batches

    def _collect_known_ids(self) -> Dict[EntityKind, Set[int]]:
        """ID, присутствующие в снапшоте, по видам сущностей."""
        kinds = {
            EntityKind.DEVICE: RecordType.DEVICES,
            EntityKind.INTERFACE: RecordType.INTERFACES,
            EntityKind.FRONT_PORT: RecordType.FRONT_PORTS,
            EntityKind.REAR_PORT: RecordType.REAR_PORTS,
            EntityKind.LOCATION: RecordType.LOCATIONS,
            EntityKind.SITE: RecordType.SITES,
            EntityKind.VLAN: RecordType.VLANS,
            EntityKind.VLAN_GROUP: RecordType.VLAN_GROUPS,
            EntityKind.L2VPN: RecordType.L2VPNS,
            EntityKind.WIRELESS_LAN: RecordType.WIRELESS_LANS,
            EntityKind.WIRELESS_LAN_GROUP: RecordType.WIRELESS_LAN_GROUPS,
            EntityKind.TENANT: RecordType.TENANTS,
            EntityKind.IP_ADDRESS: RecordType.IP_ADDRESSES,
        }
        known = {}
        for kind, record_type in kinds.items():
            ids = {_safe_id(r.get("id")) for r in self._batches[record_type]}
            ids.discard(None)
            known[kind] = ids
        return known

    def _normalize_batch(
        self,
        record_type: RecordType,
        parse: Callable[[Dict[str, Any], _RecordContext], Any],
        target: Dict[int, Any],
    ) -> None:
        """Разбирает пакет: ошибки записи → Diagnostic, запуск продолжается."""
        for raw in self._batches[record_type]:
            record_id = _safe_id(raw.get("id"))
            ctx = _RecordContext(record_type, record_id)
            if record_id is None:
                self._reject(ctx.error("отсутствует или некорректен обязательный id", "id"), "missing-id")
                continue
            if record_id in target:
                ctx.warn(f"дубликат id {record_id}, запись отброшена", "id", "duplicate")
                self._result.diagnostics.extend(ctx.warnings)
                continue
            try:
                entity = parse(raw, ctx)
            except NormalizationError as e:
                self._reject(e, "invalid-record")
                continue
            target[record_id] = entity
            self._result.diagnostics.extend(ctx.warnings)

    def _reject(self, error: NormalizationError, code: str) -> None:
        logger.debug(f"Запись отброшена: {error}")
        self._result.diagnostics.append(Diagnostic(
            severity=Severity.ERROR,
            record_type=error.record_type or "",
            record_id=error.record_id,
            message=error.message,
            field=error.field or "",
            code=code,
        ))

    # ==================== ССЫЛКИ ====================

    def _ref(
        self,
        kind: EntityKind,
        value: Any,
        ctx: _RecordContext,
        field_name: str,
    ) -> Optional[Ref]:
        """
        Разбирает ссылку: int, "12", {"id": 12} или None.

        Returns:
            Ref (resolved=False если цели нет в снапшоте) или None
        """
        if value is None or value == "" or value == {}:
            return None
        ref_id = _safe_id(value.get("id") if isinstance(value, dict) else value)
        if ref_id is None:
            raise ctx.error(f"некорректная ссылка {value!r}", field_name)
        resolved = ref_id in self._known.get(kind, ())
        if not resolved:
            ctx.warn(
                f"{kind.value}:{ref_id} отсутствует в снапшоте",
                field_name,
                "dangling-reference",
            )
        return Ref(kind, ref_id, resolved)

    def _required_ref(self, kind: EntityKind, raw: Dict[str, Any], ctx: _RecordContext, field_name: str) -> Ref:
        ref = self._ref(kind, raw.get(field_name), ctx, field_name)
        if ref is None:
            raise ctx.error(f"отсутствует обязательное поле {field_name}", field_name)
        return ref

    def _custom_ref(
        self,
        kind: EntityKind,
        custom_fields: Dict[str, Any],
        key: str,
        ctx: _RecordContext,
    ) -> Optional[Ref]:
        """Ссылка из custom field; некорректное значение — предупреждение, запись сохраняется."""
        field_name = f"custom_fields.{key}"
        try:
            return self._ref(kind, custom_fields.get(key), ctx, field_name)
        except NormalizationError as e:
            ctx.warn(e.message, field_name, "invalid-custom-field")
            return None

    def _ref_list(self, kind: EntityKind, values: Any, ctx: _RecordContext, field_name: str) -> Tuple[Ref, ...]:
        """Список ссылок без дублей, отсортированный по ID."""
        refs = {}
        for value in values or ():
            ref = self._ref(kind, value, ctx, field_name)
            if ref is not None:
                refs.setdefault(ref.id, ref)
        return tuple(refs[k] for k in sorted(refs))

    def _termination(
        self,
        raw: Dict[str, Any],
        allowed: frozenset,
        ctx: _RecordContext,
        field_name: str,
    ):
        """
        Разбирает полиморфную терминацию по дискриминатору.

        Поддерживаемые формы:
            {"object_type": "dcim.interface", "object_id": 5}
            {"termination_type": "dcim.frontport", "termination_id": 7}
            {"assigned_object_type": "ipam.vlan", "assigned_object_id": 3}
            {"__typename": "RearPortType", "id": "9"}
            {"assigned_object": {"__typename": "InterfaceType", "id": "4"}}
        """
        if not isinstance(raw, dict):
            raise ctx.error(f"некорректная терминация {raw!r}", field_name)
        nested = raw.get("assigned_object") if isinstance(raw.get("assigned_object"), dict) else None
        if nested is not None and "__typename" in nested:
            raw = nested

        type_tag = (
            raw.get("object_type")
            or raw.get("termination_type")
            or raw.get("assigned_object_type")
            or raw.get("__typename")
        )
        kind = resolve_termination_type(type_tag)
        if kind is None or kind not in allowed:
            raise ctx.error(f"неподдерживаемый тип терминации {type_tag!r}", field_name)

        target_id = raw.get("object_id", raw.get("termination_id", raw.get("assigned_object_id")))
        if target_id is None:
            obj = raw.get("object") or raw.get("termination") or raw.get("assigned_object")
            if isinstance(obj, dict):
                target_id = obj.get("id")
            elif "__typename" in raw:
                # Сам raw — вложенный объект GraphQL; у записи REST id — это id терминации
                target_id = raw.get("id")
        ref = self._ref(kind, target_id, ctx, field_name)
        if ref is None:
            raise ctx.error("терминация без id объекта", field_name)
        return TERMINATION_CLASSES[kind](ref)

    # ==================== РАЗБОР ЗАПИСЕЙ ====================

    def _parse_tenant(self, raw: Dict[str, Any], ctx: _RecordContext) -> Tenant:
        return Tenant(
            id=ctx.record_id,
            name=_text(raw.get("name")),
            custom_fields=_custom_fields(raw),
        )

    def _parse_site(self, raw: Dict[str, Any], ctx: _RecordContext) -> Site:
        return Site(
            id=ctx.record_id,
            name=_text(raw.get("name")),
            tenant=self._ref(EntityKind.TENANT, raw.get("tenant"), ctx, "tenant"),
        )

    def _parse_location(self, raw: Dict[str, Any], ctx: _RecordContext) -> Location:
        return Location(
            id=ctx.record_id,
            name=_text(raw.get("name")),
            tenant=self._ref(EntityKind.TENANT, raw.get("tenant"), ctx, "tenant"),
        )

    def _parse_vlan_group(self, raw: Dict[str, Any], ctx: _RecordContext) -> VlanGroup:
        return VlanGroup(id=ctx.record_id, name=_text(raw.get("name")), slug=_text(raw.get("slug")))

    def _parse_vlan(self, raw: Dict[str, Any], ctx: _RecordContext) -> Vlan:
        vid = _safe_id(raw.get("vid"))
        if vid is None or not 1 <= vid <= 4094:
            raise ctx.error(f"некорректный VID {raw.get('vid')!r}", "vid")
        return Vlan(
            id=ctx.record_id,
            vid=vid,
            name=_text(raw.get("name")),
            group=self._ref(EntityKind.VLAN_GROUP, raw.get("group"), ctx, "group"),
            tenant=self._ref(EntityKind.TENANT, raw.get("tenant"), ctx, "tenant"),
        )

    def _parse_wlan_group(self, raw: Dict[str, Any], ctx: _RecordContext) -> WirelessLANGroup:
        custom_fields = _custom_fields(raw)
        return WirelessLANGroup(
            id=ctx.record_id,
            name=_text(raw.get("name")),
            slug=_text(raw.get("slug")),
            controller=self._custom_ref(EntityKind.DEVICE, custom_fields, "controller", ctx),
            mgmt_vlan=self._custom_ref(EntityKind.VLAN, custom_fields, "mgmt_vlan", ctx),
            custom_fields=custom_fields,
        )

    def _parse_wlan(self, raw: Dict[str, Any], ctx: _RecordContext) -> WirelessLAN:
        ssid = _text(raw.get("ssid"))
        if not ssid:
            raise ctx.error("отсутствует SSID", "ssid")
        return WirelessLAN(
            id=ctx.record_id,
            ssid=ssid,
            auth_type=_text(raw.get("auth_type")),
            auth_psk=_text(raw.get("auth_psk")),
            vlan=self._ref(EntityKind.VLAN, raw.get("vlan"), ctx, "vlan"),
            group=self._ref(EntityKind.WIRELESS_LAN_GROUP, raw.get("group"), ctx, "group"),
            tenant=self._ref(EntityKind.TENANT, raw.get("tenant"), ctx, "tenant"),
        )

    def _parse_ip_address(self, raw: Dict[str, Any], ctx: _RecordContext) -> IPAddress:
        address = _text(raw.get("address"))
        if not address:
            raise ctx.error("отсутствует адрес", "address")

        assigned = None
        object_type = raw.get("assigned_object_type")
        if object_type and raw.get("assigned_object_id") is not None:
            # IP может быть назначен не только интерфейсу (vminterface, fhrpgroup)
            if resolve_termination_type(object_type) == EntityKind.INTERFACE:
                assigned = self._ref(EntityKind.INTERFACE, raw.get("assigned_object_id"), ctx, "assigned_object_id")
        if assigned is not None:
            self._ips_by_interface.setdefault(assigned.id, []).append(ctx.record_id)

        return IPAddress(
            id=ctx.record_id,
            address=address,
            role=_text(raw.get("role")),
            assigned_interface=assigned,
            tenant=self._ref(EntityKind.TENANT, raw.get("tenant"), ctx, "tenant"),
        )

    def _parse_device(self, raw: Dict[str, Any], ctx: _RecordContext) -> Device:
        custom_fields = _custom_fields(raw)
        primary_ip4 = self._ref(EntityKind.IP_ADDRESS, raw.get("primary_ip4"), ctx, "primary_ip4")
        primary_ip6 = self._ref(EntityKind.IP_ADDRESS, raw.get("primary_ip6"), ctx, "primary_ip6")
        return Device(
            id=ctx.record_id,
            name=_text(raw.get("name")),
            role=_text(raw.get("role") or raw.get("device_role")),
            platform=_text(raw.get("platform")),
            serial=_text(raw.get("serial")),
            status=_text(raw.get("status")),
            primary_ip4=primary_ip4,
            primary_ip6=primary_ip6,
            primary_ip4_address=self._ip_address_of(primary_ip4, raw.get("primary_ip4")),
            primary_ip6_address=self._ip_address_of(primary_ip6, raw.get("primary_ip6")),
            tenant=self._ref(EntityKind.TENANT, raw.get("tenant"), ctx, "tenant"),
            location=self._ref(EntityKind.LOCATION, raw.get("location"), ctx, "location"),
            site=self._ref(EntityKind.SITE, raw.get("site"), ctx, "site"),
            wlan_group=self._custom_ref(EntityKind.WIRELESS_LAN_GROUP, custom_fields, "wlan_group", ctx),
            custom_fields=custom_fields,
        )

    def _ip_address_of(self, ref: Optional[Ref], nested: Any) -> str:
        """Адрес из нормализованной записи IP, иначе из вложенного объекта."""
        ip = self._result.get(ref)
        if ip is not None:
            return ip.address
        if isinstance(nested, dict):
            return _text(nested.get("address"))
        return ""

    def _parse_interface(self, raw: Dict[str, Any], ctx: _RecordContext) -> Interface:
        name = _text(raw.get("name"))
        if not name:
            raise ctx.error("отсутствует имя интерфейса", "name")

        bridge = self._ref(EntityKind.INTERFACE, raw.get("bridge"), ctx, "bridge")
        if bridge is not None and bridge.id == ctx.record_id:
            raise ctx.error("bridge ссылается на сам интерфейс", "bridge")

        untagged = raw.get("untagged_vlan")
        if isinstance(untagged, (list, tuple)):
            if len(untagged) > 1:
                raise ctx.error(f"несколько untagged VLAN ({len(untagged)})", "untagged_vlan")
            untagged = untagged[0] if untagged else None

        ip_ids = set(self._ips_by_interface.get(ctx.record_id, ()))
        inline_ips = self._ref_list(EntityKind.IP_ADDRESS, raw.get("ip_addresses"), ctx, "ip_addresses")
        ip_refs = {ref.id: ref for ref in inline_ips}
        for ip_id in ip_ids:
            ip_refs.setdefault(ip_id, Ref(EntityKind.IP_ADDRESS, ip_id))

        return Interface(
            id=ctx.record_id,
            name=name,
            device=self._required_ref(EntityKind.DEVICE, raw, ctx, "device"),
            label=_text(raw.get("label")),
            enabled=bool(raw.get("enabled", True)),
            type=_text(raw.get("type")),
            mgmt_only=bool(raw.get("mgmt_only", False)),
            bridge=bridge,
            tags=frozenset(_text(t) for t in raw.get("tags") or () if _text(t)),
            untagged_vlan=self._ref(EntityKind.VLAN, untagged, ctx, "untagged_vlan"),
            tagged_vlans=self._ref_list(EntityKind.VLAN, raw.get("tagged_vlans"), ctx, "tagged_vlans"),
            ip_addresses=tuple(ip_refs[k] for k in sorted(ip_refs)),
            wireless_lans=self._ref_list(EntityKind.WIRELESS_LAN, raw.get("wireless_lans"), ctx, "wireless_lans"),
        )

    def _parse_rear_port(self, raw: Dict[str, Any], ctx: _RecordContext) -> RearPort:
        positions = _safe_id(raw.get("positions")) or 1
        return RearPort(
            id=ctx.record_id,
            name=_text(raw.get("name")),
            device=self._required_ref(EntityKind.DEVICE, raw, ctx, "device"),
            positions=positions,
        )

    def _parse_front_port(self, raw: Dict[str, Any], ctx: _RecordContext) -> FrontPort:
        position = _safe_id(raw.get("rear_port_position")) or 1
        return FrontPort(
            id=ctx.record_id,
            name=_text(raw.get("name")),
            device=self._required_ref(EntityKind.DEVICE, raw, ctx, "device"),
            rear_port=self._ref(EntityKind.REAR_PORT, raw.get("rear_port"), ctx, "rear_port"),
            rear_port_position=position,
        )

    def _parse_cable(self, raw: Dict[str, Any], ctx: _RecordContext) -> Cable:
        sides: Dict[str, CableTermination] = {}
        for side, field_name in (("A", "a_terminations"), ("B", "b_terminations")):
            terms = raw.get(field_name)
            if isinstance(terms, dict):
                terms = [terms]
            terms = list(terms or ())
            if len(terms) != 1:
                raise ctx.error(
                    f"сторона {side} должна иметь ровно одну терминацию, получено {len(terms)}",
                    field_name,
                )
            sides[side] = self._termination(terms[0], CABLE_TERMINATION_KINDS, ctx, field_name)

        a_key, b_key = sides["A"].ref.key, sides["B"].ref.key
        if a_key == b_key:
            raise ctx.error(f"обе стороны терминированы на {sides['A'].ref}", "b_terminations")
        for key in (a_key, b_key):
            other = self._result.port_cables.get(key)
            if other is not None:
                raise ctx.error(f"порт {key[0]}:{key[1]} уже терминирован кабелем {other}", "terminations")

        self._result.port_cables[a_key] = ctx.record_id
        self._result.port_cables[b_key] = ctx.record_id
        return Cable(
            id=ctx.record_id,
            a_termination=sides["A"],
            b_termination=sides["B"],
            label=_text(raw.get("label")),
            status=_text(raw.get("status")),
        )

    def _parse_l2vpn(self, raw: Dict[str, Any], ctx: _RecordContext) -> L2VPN:
        terminations: List[L2VPNTermination] = []
        for item in raw.get("terminations") or ():
            try:
                terminations.append(self._termination(item, L2VPN_TERMINATION_KINDS, ctx, "terminations"))
            except NormalizationError as e:
                # Неподдерживаемая терминация (vminterface) не отменяет весь L2VPN
                self._reject(e, "invalid-termination")
        return L2VPN(
            id=ctx.record_id,
            name=_text(raw.get("name")),
            type=_text(raw.get("type")),
            identifier=_safe_id(raw.get("identifier")),
            tenant=self._ref(EntityKind.TENANT, raw.get("tenant"), ctx, "tenant"),
            terminations=_unique_terminations(terminations),
        )

    def _parse_prefix(self, raw: Dict[str, Any], ctx: _RecordContext) -> Prefix:
        prefix = _text(raw.get("prefix"))
        if not prefix:
            raise ctx.error("отсутствует префикс", "prefix")
        return Prefix(
            id=ctx.record_id,
            prefix=prefix,
            role=_text(raw.get("role")),
            vlan=self._ref(EntityKind.VLAN, raw.get("vlan"), ctx, "vlan"),
            tenant=self._ref(EntityKind.TENANT, raw.get("tenant"), ctx, "tenant"),
        )

    def _parse_ip_range(self, raw: Dict[str, Any], ctx: _RecordContext) -> IPRange:
        start, end = _text(raw.get("start_address")), _text(raw.get("end_address"))
        if not start or not end:
            raise ctx.error("диапазон без начала или конца", "start_address")
        return IPRange(
            id=ctx.record_id,
            start_address=start,
            end_address=end,
            role=_text(raw.get("role")),
            tenant=self._ref(EntityKind.TENANT, raw.get("tenant"), ctx, "tenant"),
        )

    # ==================== ПОСТОБРАБОТКА ====================

    def _attach_l2vpn_terminations(self) -> None:
        """Присоединяет терминации из отдельного пакета l2vpn_terminations."""
        extra: Dict[int, List[L2VPNTermination]] = {}
        seen: Set[int] = set()
        for raw in self._batches[RecordType.L2VPN_TERMINATIONS]:
            record_id = _safe_id(raw.get("id"))
            ctx = _RecordContext(RecordType.L2VPN_TERMINATIONS, record_id)
            if record_id is None:
                self._reject(ctx.error("отсутствует или некорректен обязательный id", "id"), "missing-id")
                continue
            if record_id in seen:
                ctx.warn(f"дубликат id {record_id}, запись отброшена", "id", "duplicate")
                self._result.diagnostics.extend(ctx.warnings)
                continue
            seen.add(record_id)
            try:
                l2vpn_ref = self._required_ref(EntityKind.L2VPN, raw, ctx, "l2vpn")
                termination = self._termination(raw, L2VPN_TERMINATION_KINDS, ctx, "assigned_object")
            except NormalizationError as e:
                self._reject(e, "invalid-record")
                continue
            self._result.diagnostics.extend(ctx.warnings)
            if l2vpn_ref.id in self._result.l2vpns:
                extra.setdefault(l2vpn_ref.id, []).append(termination)

        for l2vpn_id, terminations in extra.items():
            l2vpn = self._result.l2vpns[l2vpn_id]
            merged = _unique_terminations(list(l2vpn.terminations) + terminations)
            self._result.l2vpns[l2vpn_id] = replace(l2vpn, terminations=merged)

    def _attach_wlan_group_members(self) -> None:
        """Точки доступа группы WLAN — устройства с custom field wlan_group."""
        aps: Dict[int, List[Ref]] = {}
        for dev_id in sorted(self._result.devices):
            group = self._result.devices[dev_id].wlan_group
            if group is not None and group.id in self._result.wireless_lan_groups:
                aps.setdefault(group.id, []).append(Ref(EntityKind.DEVICE, dev_id))

        for group_id, members in aps.items():
            group = self._result.wireless_lan_groups[group_id]
            self._result.wireless_lan_groups[group_id] = replace(group, aps=tuple(members))

    def _index_front_ports(self) -> None:
        """rear port → front ports, отсортированные по (позиция, id)."""
        by_rear: Dict[int, List[FrontPort]] = {}
        for front in self._result.front_ports.values():
            if front.rear_port is not None and front.rear_port.resolved:
                by_rear.setdefault(front.rear_port.id, []).append(front)
        self._result.front_ports_by_rear = {
            rear_id: tuple(f.id for f in sorted(fronts, key=lambda f: (f.rear_port_position, f.id)))
            for rear_id, fronts in sorted(by_rear.items())
        }


# ==================== УТИЛИТЫ ====================

def _safe_id(value: Any) -> Optional[int]:
    """12, "12", 12.0 → 12; всё остальное → None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _sort_key(raw: Dict[str, Any]) -> Tuple[int, int]:
    record_id = _safe_id(raw.get("id"))
    return (0, 0) if record_id is None else (1, record_id)


def _text(value: Any) -> str:
    """
    Строковое значение поля NetBox.

    Choice-поля приходят как {"value": ..., "label": ...}, вложенные
    объекты как {"id": ..., "name": ..., "slug": ...}.
    """
    if value is None:
        return ""
    if isinstance(value, dict):
        for key in ("value", "slug", "name", "label"):
            if value.get(key):
                return str(value[key])
        return ""
    return str(value).strip()


def _custom_fields(raw: Dict[str, Any]) -> Dict[str, Any]:
    data = raw.get("custom_fields") or raw.get("custom_field_data") or {}
    return dict(data) if isinstance(data, dict) else {}


def _unique_terminations(terminations: List[L2VPNTermination]) -> Tuple[L2VPNTermination, ...]:
    """Терминации без дублей, в порядке (вид, id)."""
    unique = {(t.ref.kind.value, t.ref.id): t for t in terminations}
    return tuple(unique[k] for k in sorted(unique))

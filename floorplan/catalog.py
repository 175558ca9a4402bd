"""Machine catalog and starting layout of the training cell."""
from __future__ import annotations

from typing import Dict, List

from .models import ItemSpec, Machine

STATUS_COLORS: Dict[str, str] = {
    "Operacional": "#10b981",
    "Manutenção": "#f59e0b",
    "Parada": "#ef4444",
    "Desligada": "#ef4444",
}


def status_color(status: str) -> str:
    return STATUS_COLORS.get(status, "#ef4444")


def default_machines() -> List[Machine]:
    return [
        Machine("1081579", "Furadeira S.A. Yadoya", "Furadeira de Bancada", "FY-B 25 E (Série 0813) - 220V"),
        Machine("1081578", "Furadeira S.A. Yadoya", "Furadeira de Bancada", "FY-B 25 E (Série 0713) - 220V"),
        Machine("465067", "Torno Nardini", "Torno Convencional", "MC220AE (Série 465067) - 220V"),
        Machine("465059", "Torno Nardini", "Torno Convencional", "MC220AE (Série 465059) - 220V"),
        Machine("779282", "Torno Nardini", "Torno Convencional", "MC220AE (Série 779282) - 220V"),
        Machine("463285", "Serra Fita", "Serra de Fita", "Standardizata"),
        Machine("1124424", "Torno ROMI", "Torno CNC", "T240 (Série 016-018306-452) - 220V"),
        Machine("1124425", "Torno ROMI", "Torno CNC", "T240 (Série 016-018309-452) - 220V"),
        Machine("1124426", "Torno ROMI", "Torno CNC", "T240 (Série 016-018310-452) - 220V"),
        Machine("1124427", "Torno ROMI", "Torno CNC", "T240 (Série 016-018308-452) - 220V"),
        Machine("1085926", "Fresas", "Fresadora Universal", "KonE Standard"),
        Machine("837073", "Fresas", "Fresadora", "Deb Maq Padrão"),
        Machine("837074", "Fresas", "Fresadora", "Deb Maq Padrão"),
        Machine("BD-001", "Bancadas Didáticas", "Bancada", "Bancada de Ajustagem 01"),
        Machine("BD-002", "Bancadas Didáticas", "Bancada", "Bancada de Ajustagem 02"),
        Machine("BD-003", "Bancadas Didáticas", "Bancada", "Bancada de Ajustagem 03"),
        Machine("BD-004", "Bancadas Didáticas", "Bancada", "Bancada de Ajustagem 04"),
        Machine("RT-001", "Retífica", "Retífica Plana", "Ferdimat"),
        Machine("ES-001", "Esmeril", "Moto Esmeril", "Industrial 2CV"),
    ]


def _machine(uid: str, ref: str, text: str, x: float, y: float, size: str, w: float | None = None) -> ItemSpec:
    override = (w, None) if w is not None else None
    return ItemSpec("machine", (x, y), reference_id=ref, display_text=text, size_class=size, size_override=override, uid=uid)


def default_layout() -> List[ItemSpec]:
    """Item specs mirroring the physical arrangement of the cell."""
    return [
        # left column
        _machine("ret-1", "RT-001", "RETÍFICA", 50, 50, "medium"),
        _machine("fur-1", "1081579", "FURADEIRA", 50, 130, "small"),
        _machine("fur-2", "1081578", "FURADEIRA", 50, 190, "small"),
        # mid-left column
        _machine("ser-col-1", "463285", "SERRA", 176, 224, "medium"),
        _machine("ser-col-2", "ES-001", "ESMERIL", 176, 272, "medium"),
        # milling machines
        _machine("fre-1", "1085926", "FRESAS", 384, 16, "medium"),
        _machine("fre-2", "837073", "FRESAS", 474, 16, "medium"),
        _machine("fre-3", "837074", "FRESAS", 564, 16, "medium"),
        # benches
        _machine("ban-1", "BD-001", "BANCADA", 384, 90, "medium", w=110),
        _machine("ban-2", "BD-002", "BANCADA", 504, 90, "medium", w=110),
        _machine("ban-3", "BD-003", "BANCADA", 384, 150, "medium", w=110),
        _machine("ban-4", "BD-004", "BANCADA", 504, 150, "medium", w=110),
        ItemSpec(
            "label",
            (384, 220),
            display_text="ARMÁRIO DE FERRAMENTAS",
            size_class="large",
            size_override=(260, 50),
            uid="arm-1",
        ),
        # lathes
        _machine("tor-1", "465067", "TORNO", 384, 290, "small"),
        _machine("tor-2", "465059", "TORNO", 444, 290, "small"),
        _machine("tor-3", "779282", "TORNO", 504, 290, "small"),
        _machine("tor-4", "1124424", "TORNO", 564, 290, "small"),
        _machine("tor-5", "1124425", "TORNO", 384, 360, "small"),
        _machine("tor-6", "1124426", "TORNO", 444, 360, "small"),
        _machine("tor-7", "1124427", "TORNO", 504, 360, "small"),
    ]


__all__ = ["STATUS_COLORS", "status_color", "default_machines", "default_layout"]

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

Row = Tuple[str, ...]


class DelimiterMode(Enum):
    """
    Estrategia para partir una línea en columnas:
      - EXPLICIT: CSV con delimitador desconocido (';', ',', tab)
      - WHITESPACE: TXT de ancho fijo (tabs o 2+ espacios)
    """
    EXPLICIT = "explicit"
    WHITESPACE = "whitespace"

    @classmethod
    def for_filename(cls, name: str) -> "DelimiterMode":
        lowered = (name or "").lower()
        if lowered.endswith((".txt", ".prn", ".dat")):
            return cls.WHITESPACE
        return cls.EXPLICIT


@dataclass(frozen=True)
class Document:
    """
    Representa la exportación ya parseada:
      - header: etiquetas de columna en orden de origen
      - rows: filas normalizadas al largo de header
    """
    header: Tuple[str, ...]
    rows: Tuple[Row, ...] = ()
    mode: DelimiterMode = DelimiterMode.EXPLICIT
    delimiter: Optional[str] = None

    def __post_init__(self):
        width = len(self.header)
        for row in self.rows:
            if len(row) != width:
                raise ValueError(f"Fila de {len(row)} columnas en documento de {width}.")

    @property
    def column_count(self) -> int:
        return len(self.header)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def __len__(self):
        return len(self.rows)


class Unresolved(Enum):
    UNRESOLVED = "unresolved"


UNRESOLVED = Unresolved.UNRESOLVED

FieldIndex = Union[int, Unresolved]


@dataclass(frozen=True)
class FieldBinding:
    """Campo lógico -> índice de columna (o UNRESOLVED). Solo lectura."""
    indices: Mapping[str, FieldIndex] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "indices", dict(self.indices))

    def index(self, name: str) -> FieldIndex:
        return self.indices.get(name, UNRESOLVED)

    def is_resolved(self, name: str) -> bool:
        return self.index(name) is not UNRESOLVED

    def value(self, row: Sequence[str], name: str) -> str:
        idx = self.index(name)
        if idx is UNRESOLVED or idx >= len(row):
            return ""
        return row[idx]

    def label(self, header: Sequence[str], name: str, default: str = "") -> str:
        idx = self.index(name)
        if idx is UNRESOLVED or idx >= len(header):
            return default
        return header[idx] or default

    def as_dict(self) -> Dict[str, FieldIndex]:
        return dict(self.indices)

    def __contains__(self, name):
        return self.is_resolved(name)

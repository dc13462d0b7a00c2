import logging
import unicodedata
from dataclasses import dataclass
from typing import Dict, Mapping, Sequence

from models.csv_model import UNRESOLVED, FieldBinding, FieldIndex

logger = logging.getLogger(__name__)


def fold(text: str) -> str:
    """Minúsculas, sin acentos y con '°'/'º' unificados."""
    t = unicodedata.normalize("NFKD", (text or "").replace("º", "°"))
    t = "".join(ch for ch in t if not unicodedata.combining(ch))
    return t.strip().lower()


@dataclass(frozen=True)
class Predicate:
    text: str
    prefix: bool = False

    def _test(self, label: str, needle: str) -> bool:
        return label.startswith(needle) if self.prefix else needle in label

    def matches(self, label: str) -> bool:
        raw = (label or "").strip().lower()
        needle = self.text.strip().lower()
        if self._test(raw, needle):
            return True
        return self._test(fold(raw), fold(needle))


def starts_with(text: str) -> Predicate:
    return Predicate(text, prefix=True)


def contains(text: str) -> Predicate:
    return Predicate(text)


# Encabezados del export de Status O/S (Planta / N° Documento / Descripción)
STATUS_OS_FIELDS: Dict[str, Sequence[Predicate]] = {
    "plant": (starts_with("planta"), contains("plant")),
    "document": (contains("documento"), contains("n° doc"), starts_with("o/s")),
    "description": (contains("descripción o/s"), contains("descripción"), starts_with("desc")),
}


def resolve(header: Sequence[str], field_specs: Mapping[str, Sequence[Predicate]]) -> FieldBinding:
    """
    Para cada campo lógico recorre el encabezado en orden y se queda con la
    primera etiqueta que cumple alguno de sus predicados.
    """
    indices: Dict[str, FieldIndex] = {}
    for name, predicates in field_specs.items():
        indices[name] = UNRESOLVED
        for idx, label in enumerate(header):
            if any(p.matches(label) for p in predicates):
                indices[name] = idx
                break
        if indices[name] is UNRESOLVED:
            logger.info("Campo '%s' sin columna en el encabezado", name)
    return FieldBinding(indices)

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from models.column_selection import ColumnSelection
from models.csv_model import DelimiterMode, Document, FieldBinding, Row
from services.config import Settings
from services.csv_service import CSVService, CSVServiceError
from services.field_resolver import STATUS_OS_FIELDS, Predicate, resolve
from services.relay_service import RelayService

logger = logging.getLogger(__name__)

INVENTARIO = 'inventario'
STATUS_OS = 'status_os'


def _excel_text(value: str) -> str:
    # openpyxl rechaza caracteres de control (p. ej. \x0c de salto de página)
    return ILLEGAL_CHARACTERS_RE.sub("", value)


@dataclass(frozen=True)
class CSVContext:
    """
    Foto de una vista: documento + columnas visibles + campos resueltos.
    Al recargar se arma un CSVContext nuevo y se reemplaza de una vez.
    """
    document: Document
    selection: ColumnSelection
    binding: FieldBinding
    source: str = ""


class CSVController:
    def __init__(self, settings: Optional[Settings] = None, relay: Optional[RelayService] = None):
        self.settings = settings or Settings()
        self.relay = relay
        self.contexts: Dict[str, CSVContext] = {}
        self.field_specs: Dict[str, Mapping[str, Sequence[Predicate]]] = {
            STATUS_OS: STATUS_OS_FIELDS,
        }

    # =========================================================================
    #  LECTURA
    # =========================================================================
    def load_file(self, path: str, context_key: str, mode: Optional[DelimiterMode] = None) -> Document:
        document = CSVService.read_file(path, mode)
        return self._install(context_key, document, path)

    def load_text(self, text: str, context_key: str, mode: DelimiterMode = DelimiterMode.EXPLICIT, source: str = "") -> Document:
        document = CSVService.parse_text(text, mode)
        return self._install(context_key, document, source)

    def load_remote(self, context_key: str = STATUS_OS, mode: DelimiterMode = DelimiterMode.EXPLICIT) -> Document:
        if self.relay is None:
            self.relay = RelayService(self.settings)
        text = self.relay.fetch_csv()
        return self.load_text(text, context_key, mode, source=self.settings.status_os_url)

    def _install(self, context_key: str, document: Document, source: str) -> Document:
        specs = self.field_specs.get(context_key, {})
        ctx = CSVContext(
            document=document,
            selection=ColumnSelection.default(document.column_count, self.settings.default_visible_columns),
            binding=resolve(document.header, specs),
            source=source,
        )
        self.contexts[context_key] = ctx
        logger.info("Contexto '%s' cargado desde %s (%d filas)", context_key, source or "texto", document.row_count)
        return document

    def get_context(self, context_key: str) -> CSVContext:
        ctx = self.contexts.get(context_key)
        if ctx is None:
            raise CSVServiceError(f"No hay datos cargados en {context_key}.")
        return ctx

    def has_data(self, context_key: str) -> bool:
        return context_key in self.contexts

    # =========================================================================
    #  COLUMNAS
    # =========================================================================
    def toggle_column(self, context_key: str, index: int) -> bool:
        return self.get_context(context_key).selection.toggle(index)

    def visible_indices(self, context_key: str) -> List[int]:
        return self.get_context(context_key).selection.visible_indices()

    # =========================================================================
    #  BÚSQUEDA
    # =========================================================================
    def search(self, context_key: str, term: str = "", field: Optional[str] = None) -> List[Row]:
        ctx = self.get_context(context_key)
        rows = ctx.document.rows
        needle = (term or "").strip().lower()
        if not needle:
            return list(rows)
        if field is not None:
            if not ctx.binding.is_resolved(field):
                return []
            return [r for r in rows if needle in ctx.binding.value(r, field).lower()]
        return [r for r in rows if any(needle in cell.lower() for cell in r)]

    def visible_table(self, context_key: str, term: str = "", field: Optional[str] = None) -> Tuple[List[str], List[List[str]]]:
        ctx = self.get_context(context_key)
        rows = self.search(context_key, term, field)
        return ctx.selection.project(ctx.document.header, rows)

    def field_rows(self, context_key: str, fields: Sequence[str], term: str = "",
                   search_field: Optional[str] = None, require: Optional[str] = None) -> List[Tuple[str, ...]]:
        ctx = self.get_context(context_key)
        result = []
        for row in self.search(context_key, term, search_field):
            values = tuple(ctx.binding.value(row, f) for f in fields)
            if require is not None and not ctx.binding.value(row, require):
                continue
            result.append(values)
        return result

    def field_labels(self, context_key: str, fields: Sequence[str], defaults: Sequence[str]) -> List[str]:
        ctx = self.get_context(context_key)
        return [ctx.binding.label(ctx.document.header, f, d) for f, d in zip(fields, defaults)]

    # ========================================================
    #  EXPORTACIÓN A EXCEL
    # ========================================================
    def export_visible(self, context_key: str, filename: str, term: str = "", field: Optional[str] = None) -> int:
        header, rows = self.visible_table(context_key, term, field)
        if not header:
            raise CSVServiceError("No hay columnas visibles para exportar.")
        header = [_excel_text(h) for h in header]
        rows = [[_excel_text(v) for v in row] for row in rows]
        df = pd.DataFrame(rows, columns=header)
        sheet_name = context_key.replace('_', ' ').title()[:31]

        try:
            with pd.ExcelWriter(filename, engine='openpyxl') as writer:
                df.to_excel(writer, sheet_name=sheet_name, index=False)
                sheet = writer.sheets[sheet_name]
                for column in sheet.columns:
                    cells = list(column)
                    for c in cells:
                        # texto que empieza con "=" se guarda literal, no como fórmula
                        if isinstance(c.value, str) and c.value.startswith("="):
                            c.data_type = "s"
                    max_length = max(len(str(c.value)) if c.value is not None else 0 for c in cells)
                    sheet.column_dimensions[cells[0].column_letter].width = max_length + 2
        except OSError as e:
            raise CSVServiceError(f"No se pudo escribir {filename}: {e}") from e

        logger.info("Exportadas %d filas de '%s' a %s", len(rows), context_key, filename)
        return len(rows)

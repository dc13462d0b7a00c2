import logging
import re
from typing import List, Optional, Sequence, Tuple

from models.csv_model import DelimiterMode, Document, Row

logger = logging.getLogger(__name__)

ENCODINGS = ['utf-8-sig', 'utf-8', 'latin-1', 'cp1252']
DELIMITER_CANDIDATES = (';', ',', '\t')
NBSP = '\u00a0'

# Tabs o 2+ espacios; una corrida mixta cuenta como un solo separador
_WHITESPACE_RUN = re.compile(r'(?:\t| {2,})+')
_NEWLINE = re.compile(r'\r\n|\n|\r')


class CSVServiceError(Exception):
    pass


class EmptyDocumentError(CSVServiceError):
    pass


class NoHeaderError(CSVServiceError):
    pass


class CSVService:
    """
    Servicio robusto para leer exportaciones tabulares 'sucias'.
    - TXT de ancho fijo (columnas separadas por tabs o varios espacios).
    - CSV con delimitador desconocido (';', ',' o tab) y comillas simples.
    - Filas cortas se rellenan y filas largas se recortan al largo del encabezado.
    """

    @staticmethod
    def decode(data: bytes) -> str:
        # latin-1 nunca falla, así que el bucle siempre devuelve algo
        for enc in ENCODINGS:
            try:
                return data.decode(enc)
            except UnicodeDecodeError:
                continue
        raise CSVServiceError("No se pudo decodificar el archivo (revise codificación).")

    @staticmethod
    def read_file(path: str, mode: Optional[DelimiterMode] = None) -> Document:
        if not path:
            raise CSVServiceError("No se seleccionó ningún archivo.")
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise CSVServiceError(f"Error de lectura: {e}") from e

        if mode is None:
            mode = DelimiterMode.for_filename(path)
        document = CSVService.parse_text(CSVService.decode(data), mode)
        logger.info("Leído %s: %d columnas, %d filas (%s)", path, document.column_count, document.row_count, mode.value)
        return document

    @staticmethod
    def parse_text(text: str, mode: DelimiterMode = DelimiterMode.EXPLICIT) -> Document:
        lines = CSVService.prepare_lines(text)
        header, body, delimiter = CSVService.split(lines, mode)
        target = len(header)

        rows = []
        padded = truncated = 0
        for raw in body:
            if len(raw) < target:
                padded += 1
            elif len(raw) > target:
                truncated += 1
            rows.append(CSVService.normalize_row(raw, target))

        if padded or truncated:
            logger.debug("Normalización: %d filas rellenadas, %d recortadas", padded, truncated)
        return Document(header=tuple(header), rows=tuple(rows), mode=mode, delimiter=delimiter)

    @staticmethod
    def prepare_lines(text: str) -> List[str]:
        if text.startswith('\ufeff'):
            text = text[1:]
        lines = [line.rstrip() for line in _NEWLINE.split(text)]
        return [line for line in lines if line.strip()]

    @staticmethod
    def split(lines: Sequence[str], mode: DelimiterMode = DelimiterMode.EXPLICIT) -> Tuple[List[str], List[List[str]], Optional[str]]:
        """
        Separa encabezado y cuerpo. El delimitador se decide una sola vez a
        partir del encabezado y se aplica igual a todas las filas.
        """
        if not lines:
            raise EmptyDocumentError("El archivo está vacío o no tiene líneas válidas.")

        delimiter = None
        if mode is DelimiterMode.EXPLICIT:
            delimiter = CSVService.detect_delimiter(lines[0])

        header = CSVService.tokenize(lines[0], mode, delimiter)
        if not header:
            raise NoHeaderError("No se detectaron encabezados en la primera línea.")

        if mode is DelimiterMode.EXPLICIT and delimiter is None:
            # Encabezado de una sola columna: el cuerpo tampoco se parte
            body = [[CSVService._clean(line)] for line in lines[1:]]
        else:
            body = [CSVService.tokenize(line, mode, delimiter) for line in lines[1:]]
        return header, body, delimiter

    @staticmethod
    def detect_delimiter(line: str) -> Optional[str]:
        clean = CSVService._clean(line)
        for d in DELIMITER_CANDIDATES:
            if len(clean.split(d)) > 1:
                return d
        return None

    @staticmethod
    def tokenize(line: str, mode: DelimiterMode = DelimiterMode.EXPLICIT, delimiter: Optional[str] = None) -> List[str]:
        clean = CSVService._clean(line)

        if mode is DelimiterMode.WHITESPACE:
            return [token.strip() for token in _WHITESPACE_RUN.split(clean)]

        candidates = (delimiter,) if delimiter else DELIMITER_CANDIDATES
        for d in candidates:
            parts = clean.split(d)
            if len(parts) > 1:
                return [CSVService._unquote(p) for p in parts]

        # Sin separador: una sola columna
        return [clean]

    @staticmethod
    def _clean(line: str) -> str:
        return line.replace(NBSP, ' ').strip()

    @staticmethod
    def _unquote(token: str) -> str:
        token = token.strip()
        if len(token) >= 2 and token[0] == '"' and token[-1] == '"':
            token = token[1:-1]
        return token.strip()

    @staticmethod
    def normalize_row(row: Sequence[str], target_len: int) -> Row:
        current = len(row)

        # CASO A: Fila perfecta
        if current == target_len:
            return tuple(row)

        # CASO B: Sobran columnas (delimitador final, espacios extra)
        if current > target_len:
            return tuple(row[:target_len])

        # CASO C: Faltan columnas (Rellenar)
        return tuple(row) + ("",) * (target_len - current)

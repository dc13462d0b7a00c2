from typing import Iterable, List, Sequence, Tuple

DEFAULT_VISIBLE_COLUMNS = 6


class ColumnSelection:
    """
    Columnas visibles de una sesión de visualización.
    Siempre se recorren en orden ascendente, sin importar el orden en que
    se marcaron.
    """

    def __init__(self, indices: Iterable[int] = ()):
        self._indices = set(int(i) for i in indices)

    @classmethod
    def default(cls, column_count: int, limit: int = DEFAULT_VISIBLE_COLUMNS) -> "ColumnSelection":
        return cls(range(min(limit, column_count)))

    def toggle(self, index: int) -> bool:
        """Agrega o quita el índice. Devuelve True si quedó visible."""
        if index in self._indices:
            self._indices.discard(index)
            return False
        self._indices.add(index)
        return True

    def is_visible(self, index: int) -> bool:
        return index in self._indices

    def visible_indices(self) -> List[int]:
        return sorted(self._indices)

    def project(self, header: Sequence[str], rows: Iterable[Sequence[str]]) -> Tuple[List[str], List[List[str]]]:
        indices = self.visible_indices()
        visible_header = [header[i] if 0 <= i < len(header) else "" for i in indices]
        visible_rows = []
        for row in rows:
            visible_rows.append([row[i] if 0 <= i < len(row) else "" for i in indices])
        return visible_header, visible_rows

    def __len__(self):
        return len(self._indices)

    def __iter__(self):
        return iter(self.visible_indices())

    def __repr__(self):
        return f"ColumnSelection({self.visible_indices()})"

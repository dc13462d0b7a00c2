import tkinter as tk
from tkinter import ttk


class TableView(ttk.Frame):
    """
    Treeview con buscador. on_search recibe (término: str) y devuelve las
    filas ya filtradas; sin callback se filtra localmente en cualquier celda.
    """

    def __init__(self, parent, on_search=None, search_label="Buscar:", *args, **kwargs):
        super().__init__(parent, *args, **kwargs)
        self.on_search = on_search
        control_frame = ttk.Frame(self)
        control_frame.pack(fill="x", pady=(0, 5))
        ttk.Label(control_frame, text=search_label).pack(side="left", padx=(0, 5))
        self.search_var = tk.StringVar()
        self.search_entry = ttk.Entry(control_frame, textvariable=self.search_var, width=30)
        self.search_entry.pack(side="left", padx=(0, 10))
        self.search_entry.bind("<KeyRelease>", self._on_search)
        self.clear_search_btn = ttk.Button(control_frame, text="Limpiar", command=self._clear_search)
        self.clear_search_btn.pack(side="left")
        self.extra_frame = ttk.Frame(control_frame)
        self.extra_frame.pack(side="left", padx=(10, 0))
        self.status_label = ttk.Label(control_frame, text="")
        self.status_label.pack(side="right")
        tree_frame = ttk.Frame(self)
        tree_frame.pack(fill="both", expand=True)
        self._tree = ttk.Treeview(tree_frame, show="headings")
        self._tree.pack(side="left", fill="both", expand=True)
        self._scroll_y = ttk.Scrollbar(tree_frame, orient="vertical", command=self._tree.yview)
        self._scroll_y.pack(side="right", fill="y")
        self._tree.configure(yscrollcommand=self._scroll_y.set)
        self._scroll_x = ttk.Scrollbar(self, orient="horizontal", command=self._tree.xview)
        self._scroll_x.pack(side="bottom", fill="x")
        self._tree.configure(xscrollcommand=self._scroll_x.set)
        self._tree.tag_configure("odd", background="#F7FAFD")
        self._all_data = []
        self._current_columns = []
        self.empty_message = "No se han cargado datos."
        self.no_match_message = "No hay resultados para esa búsqueda."

    def get_term(self):
        return self.search_var.get().strip()

    def _on_search(self, event=None):
        search_term = self.get_term().lower()
        if not search_term:
            self._display_data(self._all_data)
            self.status_label.config(text=f"Mostrando todos los {len(self._all_data)} registros")
            return
        if self.on_search:
            filtered_data = self.on_search(search_term)
        else:
            filtered_data = [row for row in self._all_data if any(search_term in str(cell).lower() for cell in row)]
        self._display_data(filtered_data)
        if not filtered_data:
            self.status_label.config(text=self.no_match_message)
        else:
            self.status_label.config(text=f"Mostrando {len(filtered_data)} de {len(self._all_data)} registros")

    def _clear_search(self):
        self.search_var.set("")
        self._display_data(self._all_data)
        self.status_label.config(text=f"Mostrando todos los {len(self._all_data)} registros")

    def refresh(self):
        self._on_search()

    def _display_data(self, data):
        for r in self._tree.get_children(): self._tree.delete(r)
        if not self._current_columns: return
        for idx, row in enumerate(data):
            safe_row = []
            for i in range(len(self._current_columns)):
                if i < len(row): safe_row.append("" if row[i] is None else str(row[i]))
                else: safe_row.append("")
            self._tree.insert("", "end", values=tuple(safe_row), tags=("odd",) if idx % 2 else ())

    def clear(self):
        for r in self._tree.get_children(): self._tree.delete(r)
        self._tree["columns"] = ()

    def update_table_multi(self, columns, rows):
        self._current_columns = list(columns)
        self._all_data = list(rows)
        self.clear()
        if not columns:
            self.status_label.config(text="Sin columnas visibles")
            return
        # ids posicionales: los encabezados pueden repetirse
        col_ids = [f"c{i}" for i in range(len(columns))]
        self._tree["columns"] = tuple(col_ids)
        for col_id, label in zip(col_ids, columns):
            self._tree.heading(col_id, text=label)
            self._tree.column(col_id, anchor="w", width=180)
        self._display_data(rows)
        if not self._all_data:
            self.status_label.config(text=self.empty_message)
        else:
            self.status_label.config(text=f"Total: {len(rows)} registros")

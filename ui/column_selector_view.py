import tkinter as tk
from tkinter import ttk


class ColumnSelectorView(ttk.LabelFrame):
    """Una casilla por columna del encabezado. on_toggle recibe (índice: int)."""

    def __init__(self, parent, on_toggle=None, per_row=3, *args, **kwargs):
        super().__init__(parent, text="Columnas visibles", *args, **kwargs)
        self.on_toggle = on_toggle
        self.per_row = per_row
        self._vars = []
        self.summary_label = ttk.Label(self, text="")
        self.summary_label.pack(anchor="e", padx=6)

        canvas = tk.Canvas(self, height=140, highlightthickness=0)
        scroll = ttk.Scrollbar(self, orient="vertical", command=canvas.yview)
        self._inner = ttk.Frame(canvas)
        self._inner.bind("<Configure>", lambda e: canvas.configure(scrollregion=canvas.bbox("all")))
        canvas.create_window((0, 0), window=self._inner, anchor="nw")
        canvas.configure(yscrollcommand=scroll.set)
        canvas.pack(side="left", fill="both", expand=True, padx=6, pady=6)
        scroll.pack(side="right", fill="y")

    def set_columns(self, header, visible_indices):
        for child in self._inner.winfo_children(): child.destroy()
        self._vars = []
        visible = set(visible_indices)
        for i, label in enumerate(header):
            var = tk.BooleanVar(value=i in visible)
            chk = ttk.Checkbutton(self._inner, text=label or f"(col {i + 1})", variable=var,
                                  command=lambda idx=i: self._handle_toggle(idx))
            chk.grid(row=i // self.per_row, column=i % self.per_row, sticky="w", padx=4, pady=2)
            self._vars.append(var)
        self._update_summary()

    def _handle_toggle(self, index):
        self._update_summary()
        if self.on_toggle:
            self.on_toggle(index)

    def _update_summary(self):
        checked = sum(1 for v in self._vars if v.get())
        self.summary_label.config(text=f"Columnas: {checked} / {len(self._vars)}")

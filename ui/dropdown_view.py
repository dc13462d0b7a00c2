import tkinter as tk
from tkinter import ttk

class DropdownView(ttk.Frame):
    """
    Combobox readonly con etiquetas visibles y valores internos.
    on_select recibe (valor: str | None)
    """

    def __init__(self, parent, on_select=None, placeholder="Seleccione un campo", *args, **kwargs):
        super().__init__(parent, *args, **kwargs)
        self.on_select = on_select
        self.placeholder = placeholder
        self._values = {}

        self._combobox = ttk.Combobox(self, state="readonly", font=("Arial", 10), width=22)
        self._combobox.pack(fill="x", padx=6, pady=2)
        self._combobox.bind("<<ComboboxSelected>>", self._handle_select)
        self._combobox.set(self.placeholder)

    def update_options(self, options):
        """options: lista de (etiqueta, valor)."""
        if options is None:
            options = []
        self._values = {label: value for label, value in options}
        self._combobox["values"] = [label for label, _ in options]
        if options:
            self._combobox.set(options[0][0])
        else:
            self._combobox.set("Sin opciones")

    def _handle_select(self, event):
        if self.on_select:
            self.on_select(self.get_selected())

    def get_selected(self):
        return self._values.get(self._combobox.get())

import logging
import os
from typing import Optional
import tkinter as tk
from tkinter import ttk, filedialog, messagebox

from controllers.csv_controller import CSVController, INVENTARIO, STATUS_OS
from models.csv_model import DelimiterMode
from services.config import Settings
from services.upload_service import UploadService
from ui.column_selector_view import ColumnSelectorView
from ui.dropdown_view import DropdownView
from ui.table_view import TableView

logger = logging.getLogger(__name__)

STATUS_FIELDS = ("plant", "document", "description")
STATUS_TITLES = ("Planta", "N° Documento (O/S)", "Descripción O/S")


class MainWindow:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.controller = CSVController(self.settings)
        self.uploads = UploadService(self.settings.upload_root, self.settings.upload_prefix)

        self.window = tk.Tk()
        self.window.title("Visor de Exportaciones - Inventario / Status O/S")
        self.window.geometry("1300x850")
        self.window.protocol("WM_DELETE_WINDOW", self.on_closing)

        self.main_notebook = ttk.Notebook(self.window)
        self.main_notebook.pack(fill="both", expand=True, padx=10, pady=(5, 0))

        self.status_frame = ttk.Frame(self.window, relief=tk.SUNKEN, padding=(5, 2))
        self.status_frame.pack(side="bottom", fill="x")
        self.lbl_status = ttk.Label(self.status_frame, text="Listo", anchor="w")
        self.lbl_status.pack(side="left", fill="x")
        self.progress = ttk.Progressbar(self.status_frame, mode='indeterminate', length=200)

        self.tab_inventario = ttk.Frame(self.main_notebook)
        self.main_notebook.add(self.tab_inventario, text="📦 Inventario")
        self._setup_inventario_view()

        self.tab_status = ttk.Frame(self.main_notebook)
        self.main_notebook.add(self.tab_status, text="📋 Status O/S")
        self._setup_status_view()

    def run_task(self, description, func):
        self.window.config(cursor="watch")
        self.lbl_status.config(text=f"⏳ {description}...")
        self.progress.pack(side="right", padx=10)
        self.progress.start(10)
        self.window.update()
        try:
            func()
            self.lbl_status.config(text="✅ Listo")
        except Exception as e:
            logger.exception("Falló: %s", description)
            self.lbl_status.config(text=f"❌ Error: {e}")
            messagebox.showerror("Error", str(e))
        finally:
            self.progress.stop()
            self.progress.pack_forget()
            self.window.config(cursor="")

    # =========================================================================
    #  INVENTARIO (TXT de ancho fijo)
    # =========================================================================
    def _setup_inventario_view(self):
        ctrl = ttk.Frame(self.tab_inventario, relief=tk.GROOVE, borderwidth=1)
        ctrl.pack(fill="x", padx=10, pady=10)
        ttk.Button(ctrl, text="📂 Cargar Inventario (TXT)",
                   command=lambda: self.run_task("Cargando inventario", self.load_inventario)).pack(side="left", padx=10, pady=10)
        ttk.Button(ctrl, text="⬆️ Subir archivo",
                   command=lambda: self.run_task("Subiendo archivo", self.upload_file)).pack(side="left", padx=5, pady=10)
        ttk.Button(ctrl, text="💾 Exportar Excel",
                   command=lambda: self.run_task("Exportando", self.export_inventario)).pack(side="left", padx=5, pady=10)
        self.lbl_inv_source = ttk.Label(ctrl, text="Sin archivo cargado", font=("Arial", 9, "italic"))
        self.lbl_inv_source.pack(side="right", padx=10)

        self.selector_inv = ColumnSelectorView(self.tab_inventario, on_toggle=self._on_inventario_toggle)
        self.selector_inv.pack(fill="x", padx=10)

        self.table_inv = TableView(self.tab_inventario,
                                   on_search=lambda term: self.controller.visible_table(INVENTARIO, term)[1])
        self.table_inv.empty_message = "El inventario no tiene filas."
        self.table_inv.pack(fill="both", expand=True, padx=10, pady=10)

    def load_inventario(self):
        path = filedialog.askopenfilename(filetypes=[("Texto", "*.txt"), ("CSV", "*.csv"), ("Todos", "*.*")])
        if not path: return
        self.controller.load_file(path, INVENTARIO, DelimiterMode.for_filename(path))
        self._refresh_inventario()

    def _refresh_inventario(self):
        ctx = self.controller.get_context(INVENTARIO)
        self.lbl_inv_source.config(text=f"Fuente: {os.path.basename(ctx.source)}")
        self.selector_inv.set_columns(ctx.document.header, ctx.selection.visible_indices())
        self._redraw_inventario()

    def _redraw_inventario(self):
        header, rows = self.controller.visible_table(INVENTARIO)
        self.table_inv.update_table_multi(header, rows)
        if self.table_inv.get_term():
            self.table_inv.refresh()

    def _on_inventario_toggle(self, index):
        self.controller.toggle_column(INVENTARIO, index)
        self._redraw_inventario()

    def upload_file(self):
        path = filedialog.askopenfilename(filetypes=[("Texto", "*.txt"), ("PDF", "*.pdf"), ("Todos", "*.*")])
        if not path: return
        dest = self.uploads.upload(path)
        messagebox.showinfo("Éxito", f"Archivo subido correctamente a {dest}")

    def export_inventario(self):
        if not self.controller.has_data(INVENTARIO):
            messagebox.showwarning("Aviso", "Primero cargue un inventario.")
            return
        path = filedialog.asksaveasfilename(initialfile="inventario.xlsx", defaultextension=".xlsx", filetypes=[("Excel", "*.xlsx")])
        if not path: return
        count = self.controller.export_visible(INVENTARIO, path, self.table_inv.get_term())
        self.lbl_status.config(text=f"Exportadas {count} filas")

    # =========================================================================
    #  STATUS O/S (CSV)
    # =========================================================================
    def _setup_status_view(self):
        ctrl = ttk.Frame(self.tab_status, relief=tk.GROOVE, borderwidth=1)
        ctrl.pack(fill="x", padx=10, pady=10)
        ttk.Button(ctrl, text="📂 Cargar CSV",
                   command=lambda: self.run_task("Cargando CSV", self.load_status_file)).pack(side="left", padx=10, pady=10)
        ttk.Button(ctrl, text="☁️ Descargar desde OneDrive",
                   command=lambda: self.run_task("Descargando CSV", self.load_status_remote)).pack(side="left", padx=5, pady=10)
        self.lbl_status_source = ttk.Label(ctrl, text="Sin archivo cargado", font=("Arial", 9, "italic"))
        self.lbl_status_source.pack(side="right", padx=10)

        self.table_status = TableView(self.tab_status, on_search=self._search_status, search_label="Buscar O/S:")
        self.table_status.empty_message = "No se han cargado datos desde el CSV."
        self.table_status.no_match_message = "No hay resultados para ese número de O/S."
        self.dd_field = DropdownView(self.table_status.extra_frame, on_select=lambda _: self.table_status.refresh())
        self.dd_field.pack(side="left")
        self.dd_field.update_options([
            ("N° Documento (O/S)", "document"),
            ("Planta", "plant"),
            ("Descripción", "description"),
            ("Todas las columnas", None),
        ])
        self.table_status.pack(fill="both", expand=True, padx=10, pady=10)

    def _search_status(self, term):
        return self.controller.field_rows(STATUS_OS, STATUS_FIELDS, term, self.dd_field.get_selected(), require="document")

    def load_status_file(self):
        path = filedialog.askopenfilename(filetypes=[("CSV", "*.csv"), ("Todos", "*.*")])
        if not path: return
        self.controller.load_file(path, STATUS_OS, DelimiterMode.EXPLICIT)
        self._refresh_status()

    def load_status_remote(self):
        self.controller.load_remote(STATUS_OS)
        self._refresh_status()

    def _refresh_status(self):
        ctx = self.controller.get_context(STATUS_OS)
        self.lbl_status_source.config(text=f"Fuente: {os.path.basename(ctx.source) or ctx.source}")
        titles = self.controller.field_labels(STATUS_OS, STATUS_FIELDS, STATUS_TITLES)
        rows = self.controller.field_rows(STATUS_OS, STATUS_FIELDS, require="document")
        self.table_status.update_table_multi(titles, rows)
        if self.table_status.get_term():
            self.table_status.refresh()
        missing = [t for f, t in zip(STATUS_FIELDS, STATUS_TITLES) if not ctx.binding.is_resolved(f)]
        if missing:
            messagebox.showwarning("Aviso", "No se encontraron las columnas: " + ", ".join(missing))

    def on_closing(self):
        if messagebox.askokcancel("Salir", "¿Seguro que quieres salir?"):
            self.window.destroy()

    def run(self): self.window.mainloop()

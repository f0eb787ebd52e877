# maxq/main_window.py
import html
import logging
from datetime import datetime
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QColor, QGuiApplication
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QLabel, QHBoxLayout, QPushButton, QSplitter,
    QTextEdit, QTreeWidgetItem, QMenu, QFileDialog, QHeaderView, QDialog, QLineEdit
)

from .utils.settings import SettingsStore
from .utils.resolver import RendererResolver
from .utils.errors import QueueLocked, StorageError
from .utils.desktop import open_folder
from .utils.paths import output_dir_for
from .models.job import Job
from .models.status import LEVEL_COLORS, queue_summary, status_color, status_label
from .workers.launcher import RenderLauncher
from .workers.sequencer import RenderQueue
from .widgets.queue_tree import DropTree
from .widgets.details_panel import DetailsPanel
from .dialogs.prefs import PrefsDialog

log = logging.getLogger(__name__)

COL_FILE, COL_STATUS, COL_OUTPUT = range(3)


class MainWindow(QMainWindow):
    def __init__(self, store: SettingsStore | None = None):
        super().__init__()
        self.setWindowTitle("3ds Max Render Queue")
        self.resize(1200, 800)
        self.store = store or SettingsStore()

        self.queue_label = QLabel("Queue: 0 jobs loaded")
        self.queue_label.setStyleSheet("font-weight:600;")

        self.tree = DropTree()
        self.tree.setColumnCount(3)
        self.tree.setHeaderLabels(["File", "Status", "Output"])
        self.tree.setContextMenuPolicy(Qt.CustomContextMenu)
        self.tree.customContextMenuRequested.connect(self._row_menu)
        self.tree.currentItemChanged.connect(self._on_current_item_changed)
        self.tree.pathsDropped.connect(self._add_paths)
        self.tree.itemsReordered.connect(self._on_jobs_reordered)

        hdr = self.tree.header()
        hdr.setStretchLastSection(False)
        hdr.setSectionResizeMode(COL_FILE, QHeaderView.Stretch)
        hdr.setSectionResizeMode(COL_STATUS, QHeaderView.ResizeToContents)
        hdr.setSectionResizeMode(COL_OUTPUT, QHeaderView.Interactive)

        self.details = DetailsPanel()

        self.center_split = QSplitter(Qt.Horizontal)
        self.center_split.addWidget(self.tree)
        self.center_split.addWidget(self.details)
        self.center_split.setSizes([860, 340])

        self.console = QTextEdit(); self.console.setReadOnly(True)
        self.console.setPlaceholderText("3dsmaxcmd output will appear here…")

        self.v_split = QSplitter(Qt.Vertical)
        self.v_split.addWidget(self.center_split)
        self.v_split.addWidget(self.console)
        self.v_split.setSizes([560, 240])

        self.project_edit = QLineEdit(self.store.get().get("project_name", ""))
        self.project_edit.setPlaceholderText("Project name (optional subfolder)")

        self.btn_add = QPushButton("Add Files…"); self.btn_add.clicked.connect(self.add_files)
        self.btn_remove = QPushButton("Remove Selected"); self.btn_remove.clicked.connect(self.remove_selected)
        self.btn_clear = QPushButton("Clear"); self.btn_clear.clicked.connect(self.clear_all)
        self.btn_set_out = QPushButton("Set Output Folder…"); self.btn_set_out.clicked.connect(self.set_output_root)
        self.btn_open_out = QPushButton("Open Output Folder"); self.btn_open_out.clicked.connect(self.open_output_root)
        self.btn_start = QPushButton("Render All"); self.btn_start.clicked.connect(self.start_queue)
        self.btn_cancel = QPushButton("Cancel Selected"); self.btn_cancel.clicked.connect(self.cancel_selected)
        self.btn_clear_log = QPushButton("Clear Output"); self.btn_clear_log.clicked.connect(self.console.clear)

        top = QHBoxLayout()
        for b in (self.btn_add, self.btn_remove, self.btn_clear, self.btn_set_out, self.btn_open_out): top.addWidget(b)
        top.addStretch()
        run_row = QHBoxLayout()
        run_row.addWidget(QLabel("Project:")); run_row.addWidget(self.project_edit)
        for b in (self.btn_start, self.btn_cancel, self.btn_clear_log): run_row.addWidget(b)

        central = QWidget(); v = QVBoxLayout(central)
        v.addWidget(self.queue_label); v.addLayout(top); v.addLayout(run_row); v.addWidget(self.v_split)
        self.setCentralWidget(central)

        m = self.menuBar().addMenu("&Options")
        act_prefs = QAction("Preferences…", self); act_prefs.triggered.connect(self.open_prefs); m.addAction(act_prefs)

        self.resolver = RendererResolver(self.store)
        self.launcher = RenderLauncher(self.store, self.resolver, self)
        self.queue = RenderQueue(self.launcher, self)
        self.queue.job_changed.connect(self._on_job_changed)
        self.queue.jobs_changed.connect(self._rebuild_tree)
        self.queue.output.connect(self.on_output)
        self.queue.message.connect(self.append_message)
        self.queue.running_changed.connect(self._on_running_changed)

        self._restore_layout()
        self._on_running_changed(False)
        self._report_startup()

    def _report_startup(self):
        if self.store.load_error:
            self.append_message(f"Failed to load settings: {self.store.load_error}", "error")
        settings = self.store.get()
        if renderer := self.resolver.resolve():
            self.append_message(f"3ds Max path: {renderer}", "info")
        else:
            self.append_message("3ds Max not found. Set the 3dsmaxcmd path in Preferences.", "warning")
        self.append_message(f"Output folder: {settings['output_root']}", "info")

    def _save(self, partial: dict) -> bool:
        try:
            self.store.set(partial)
            return True
        except StorageError as e:
            log.error("%s", e)
            self.append_message(f"Error saving settings: {e}", "error")
            return False

    def _restore_layout(self):
        settings = self.store.get()
        if cw := settings.get("col_widths"):
            if len(cw) == self.tree.columnCount():
                for i, w in enumerate(cw): self.tree.setColumnWidth(i, int(w))
        if cs := settings.get("center_split_sizes"): self.center_split.setSizes([int(x) for x in cs])
        if vs := settings.get("v_split_sizes"): self.v_split.setSizes([int(x) for x in vs])

    def _save_layout(self):
        self._save({
            "col_widths": [self.tree.columnWidth(i) for i in range(self.tree.columnCount())],
            "center_split_sizes": self.center_split.sizes(),
            "v_split_sizes": self.v_split.sizes(),
            "project_name": self.project_edit.text().strip(),
        })

    def closeEvent(self, e):
        self.queue.shutdown()
        self._save_layout()
        super().closeEvent(e)

    # -- console ------------------------------------------------------

    def append_message(self, text: str, level: str = "info"):
        ts = datetime.now().strftime("%H:%M:%S")
        line = html.escape(f"[{ts}] {text}")
        if color := LEVEL_COLORS.get(level):
            line = f'<span style="color:{color}">{line}</span>'
        self.console.append(line)

    def on_output(self, job_id: str, text: str, is_error: bool):
        job = self.queue.get(job_id)
        name = job.name if job else "Unknown"
        for line in text.splitlines():
            if line.strip():
                self.append_message(f"[{name}] {line}", "error" if is_error else "info")

    # -- queue tree ---------------------------------------------------

    def _item_for(self, job_id: str) -> Optional[QTreeWidgetItem]:
        for i in range(self.tree.topLevelItemCount()):
            if (item := self.tree.topLevelItem(i)).data(0, Qt.UserRole) == job_id:
                return item
        return None

    def _fill_item(self, item: QTreeWidgetItem, job: Job):
        item.setText(COL_FILE, job.name)
        item.setToolTip(COL_FILE, job.source_path)
        item.setText(COL_STATUS, status_label(job))
        item.setForeground(COL_STATUS, QColor(status_color(job)))
        item.setText(COL_OUTPUT, str(job.output_path or ""))
        item.setToolTip(COL_STATUS, job.error or "")

    def _rebuild_tree(self):
        current = self.tree.currentItem()
        current_id = current.data(0, Qt.UserRole) if current else None
        self.tree.clear()
        for job in self.queue.jobs:
            item = QTreeWidgetItem()
            item.setData(0, Qt.UserRole, job.id)
            self._fill_item(item, job)
            self.tree.addTopLevelItem(item)
            if job.id == current_id: self.tree.setCurrentItem(item)
        if not self.tree.currentItem(): self.details.clear()
        self._refresh_queue_label()

    def _on_job_changed(self, job: Job):
        if item := self._item_for(job.id):
            self._fill_item(item, job)
            if self.tree.currentItem() is item: self.details.show_job(job)
        self._refresh_queue_label()

    def _on_jobs_reordered(self):
        try:
            self.queue.reorder(self.tree.job_ids())
            self.append_message("Queue order changed.", "info")
        except (QueueLocked, ValueError) as e:
            self.append_message(str(e), "warning")
            self._rebuild_tree()

    def _on_current_item_changed(self, cur: Optional[QTreeWidgetItem], prev: Optional[QTreeWidgetItem]):
        if cur and (job := self.queue.get(cur.data(0, Qt.UserRole))):
            self.details.show_job(job)
        else:
            self.details.clear()

    def _selected_job(self) -> Optional[Job]:
        if not (item := self.tree.currentItem()): return None
        return self.queue.get(item.data(0, Qt.UserRole))

    def _row_menu(self, pos):
        if not (item := self.tree.itemAt(pos)): return
        if not (job := self.queue.get(item.data(0, Qt.UserRole))): return

        menu = QMenu(self)
        out_dir = job.output_path.parent if job.output_path else None
        act_open_out = QAction("Open Output Folder", self); act_open_out.triggered.connect(lambda: open_folder(out_dir)); menu.addAction(act_open_out)
        act_open_log = QAction("Open Log File", self); act_open_log.triggered.connect(lambda: open_folder(job.log_path)); menu.addAction(act_open_log)
        menu.addSeparator()
        act_copy_cmd = QAction("Copy 3dsmaxcmd Command", self); act_copy_cmd.triggered.connect(lambda: QGuiApplication.clipboard().setText(job.cmdline or "")); menu.addAction(act_copy_cmd)
        act_cancel = QAction("Cancel", self); act_cancel.setEnabled(not job.is_terminal)
        act_cancel.triggered.connect(lambda: self.queue.cancel(job.id)); menu.addAction(act_cancel)

        menu.exec(self.tree.viewport().mapToGlobal(pos))

    def _refresh_queue_label(self):
        self.queue_label.setText(queue_summary(self.queue.jobs, self.queue.is_running))

    def _on_running_changed(self, running: bool):
        self.btn_start.setEnabled(not running)
        self.btn_remove.setEnabled(not running)
        self.btn_clear.setEnabled(not running)
        self.btn_cancel.setEnabled(running)
        self.tree.set_locked(running)
        self._refresh_queue_label()

    # -- actions ------------------------------------------------------

    def add_files(self):
        files, _ = QFileDialog.getOpenFileNames(self, "Select 3ds Max files", "", "3ds Max Files (*.max)")
        if files: self._add_paths(files)

    def _add_paths(self, paths):
        self.queue.add_files(paths)

    def remove_selected(self):
        if not (job := self._selected_job()): return
        try:
            self.queue.remove(job.id)
        except QueueLocked as e:
            self.append_message(str(e), "warning")

    def clear_all(self):
        try:
            self.queue.clear()
        except QueueLocked as e:
            self.append_message(str(e), "warning")
            return
        self.details.clear()

    def set_output_root(self):
        d = QFileDialog.getExistingDirectory(self, "Choose output folder", self.store.get()["output_root"])
        if d and self._save({"output_root": d}):
            self.append_message(f"Output folder set to: {d}", "info")

    def open_output_root(self):
        settings = self.store.get()
        folder = output_dir_for(settings["output_root"], self.project_edit.text())
        if not open_folder(folder) and not open_folder(settings["output_root"]):
            self.append_message("Failed to open output folder.", "error")

    def start_queue(self):
        project = self.project_edit.text().strip()
        self._save({"project_name": project})
        self.queue.start(project)

    def cancel_selected(self):
        job = self._selected_job() or self.queue.active_job
        if job and not self.queue.cancel(job.id):
            self.append_message(f"{job.name} is not running or queued.", "warning")

    def open_prefs(self):
        dlg = PrefsDialog(self.store.get(), self)
        if dlg.exec() == QDialog.Accepted:
            if self._save(dlg.get_values()):
                self.append_message("Settings saved.", "success")

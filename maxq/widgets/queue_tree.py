# maxq/widgets/queue_tree.py
from pathlib import Path
from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QAbstractItemView, QTreeWidget

class DropTree(QTreeWidget):
    pathsDropped = Signal(list)  # list[str]
    itemsReordered = Signal()    # Emitted after an internal drag-drop reorder

    def __init__(self, *a, **kw):
        super().__init__(*a, **kw)
        self.setAcceptDrops(True)
        self.setDragEnabled(True)
        self.setDragDropMode(QAbstractItemView.InternalMove)

        self.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.setUniformRowHeights(True)
        self.setRootIsDecorated(False)
        self._locked = False

    def set_locked(self, locked: bool):
        """While locked, rows can't be dragged; files can still be dropped in."""
        self._locked = locked
        self.setDragEnabled(not locked)

    def dragEnterEvent(self, event):
        """Accept the drag action if it contains file URLs."""
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        elif self._locked:
            event.ignore()
        else:
            super().dragEnterEvent(event)

    def dragMoveEvent(self, event):
        """Accept the move action if it contains file URLs."""
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        elif self._locked:
            event.ignore()
        else:
            super().dragMoveEvent(event)

    def dropEvent(self, event):
        """Handle both external file drops and internal reordering."""
        if event.mimeData().hasUrls():
            paths = []
            for url in event.mimeData().urls():
                if url.isLocalFile():
                    p = Path(url.toLocalFile())
                    if p.is_file(): paths.append(str(p))
            if paths:
                self.pathsDropped.emit(paths)
                event.acceptProposedAction()
                return

        if self._locked:
            event.ignore()
            return
        # Internal move; only top-level rows exist, so keep drops between rows
        if self.dropIndicatorPosition() == QAbstractItemView.OnItem:
            event.ignore()
            return
        super().dropEvent(event)
        self.itemsReordered.emit()

    def job_ids(self) -> list[str]:
        return [self.topLevelItem(i).data(0, Qt.UserRole) for i in range(self.topLevelItemCount())]

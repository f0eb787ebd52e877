# maxq/widgets/details_panel.py
from PySide6.QtWidgets import QTreeWidget, QTreeWidgetItem, QHeaderView
from PySide6.QtGui import QColor

from ..models.status import status_label, status_color

class DetailsPanel(QTreeWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setHeaderLabels(["Property", "Value"])
        self.setRootIsDecorated(True)
        hdr = self.header()
        hdr.setSectionResizeMode(0, QHeaderView.ResizeToContents)
        hdr.setSectionResizeMode(1, QHeaderView.Stretch)

    def show_job(self, job):
        self.clear()
        job_node = QTreeWidgetItem(["Job", job.name])
        self.addTopLevelItem(job_node)
        QTreeWidgetItem(job_node, ["Source", job.source_path])
        status = QTreeWidgetItem(job_node, ["Status", status_label(job)])
        status.setForeground(1, QColor(status_color(job)))
        if job.project_name:
            QTreeWidgetItem(job_node, ["Project", job.project_name])
        if job.output_name:
            QTreeWidgetItem(job_node, ["Output name", job.output_name])

        if job.output_path or job.log_path or job.cmdline:
            run_node = QTreeWidgetItem(["Render", ""])
            self.addTopLevelItem(run_node)
            if job.output_path:
                QTreeWidgetItem(run_node, ["Output", str(job.output_path)])
            if job.log_path:
                QTreeWidgetItem(run_node, ["Log file", str(job.log_path)])
            if job.cmdline:
                QTreeWidgetItem(run_node, ["Command", job.cmdline])

        if job.error:
            err = QTreeWidgetItem(["Error", job.error])
            err.setForeground(1, QColor(status_color(job)))
            self.addTopLevelItem(err)

        self.expandAll()

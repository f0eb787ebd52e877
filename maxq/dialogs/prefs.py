# maxq/dialogs/prefs.py
from PySide6.QtWidgets import (
    QDialog, QDialogButtonBox, QFormLayout, QHBoxLayout, QLabel,
    QLineEdit, QPlainTextEdit, QPushButton, QSpinBox, QFileDialog, QVBoxLayout
)


def parse_env_lines(text: str) -> dict:
    env = {}
    for line in text.splitlines():
        if not (line := line.strip()) or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        if key := key.strip():
            env[key] = value.strip()
    return env


def format_env_lines(env: dict) -> str:
    return "\n".join(f"{k}={v}" for k, v in (env or {}).items())


class PrefsDialog(QDialog):
    def __init__(self, settings: dict, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Preferences")
        self.settings = settings
        self.setMinimumWidth(640)

        self.out_edit = QLineEdit(self.settings["output_root"])
        btn_browse_out = QPushButton("Browse…"); btn_browse_out.clicked.connect(self._browse_out)
        self.max_edit = QLineEdit(self.settings.get("max_path", ""))
        self.max_edit.setPlaceholderText("Auto-detected")
        btn_browse_max = QPushButton("Browse…"); btn_browse_max.clicked.connect(self._browse_max)
        max_hint = QLabel("(Leave blank to search Program Files\\Autodesk for 3dsmaxcmd.exe)")

        self.verbosity = QSpinBox(); self.verbosity.setRange(0, 5)
        self.verbosity.setValue(int(self.settings.get("verbosity", 5))); self.verbosity.setPrefix("-v:")

        self.extra_args = QLineEdit(self.settings.get("extra_args", ""))
        self.extra_args.setPlaceholderText("advanced: e.g. -width:1920 -height:1080")

        self.env_edit = QPlainTextEdit(format_env_lines(self.settings.get("extra_env", {})))
        self.env_edit.setPlaceholderText("One KEY=VALUE per line, passed to 3dsmaxcmd")
        self.env_edit.setFixedHeight(80)

        form = QFormLayout()
        row_out = QHBoxLayout(); row_out.addWidget(self.out_edit); row_out.addWidget(btn_browse_out)
        form.addRow("Output folder:", row_out)
        row_max = QHBoxLayout(); row_max.addWidget(self.max_edit); row_max.addWidget(btn_browse_max)
        form.addRow("3dsmaxcmd path:", row_max); form.addRow("", max_hint)
        form.addRow("Verbosity:", self.verbosity)
        form.addRow("Extra arguments:", self.extra_args)
        form.addRow("Environment:", self.env_edit)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept); buttons.rejected.connect(self.reject)

        layout = QVBoxLayout(self); layout.addLayout(form); layout.addWidget(buttons)

    def _browse_out(self):
        d = QFileDialog.getExistingDirectory(self, "Choose output folder", self.out_edit.text())
        if d: self.out_edit.setText(d)

    def _browse_max(self):
        f, _ = QFileDialog.getOpenFileName(self, "Locate 3dsmaxcmd", self.max_edit.text(), "3dsmaxcmd (3dsmaxcmd.exe);;All files (*)")
        if f: self.max_edit.setText(f)

    def get_values(self) -> dict:
        return {
            "output_root": self.out_edit.text().strip() or self.settings["output_root"],
            "max_path": self.max_edit.text().strip(),
            "verbosity": int(self.verbosity.value()),
            "extra_args": self.extra_args.text().strip(),
            "extra_env": parse_env_lines(self.env_edit.toPlainText()),
        }

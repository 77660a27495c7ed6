"""
Cities: Skylines Mod Installer - mod type prompt (PySide6)
"""

from typing import Optional, Sequence

from PySide6.QtWidgets import (
    QApplication,
    QDialog,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
)

from crp_installer import CANCEL_CHOICE


# ── Mod Type Dialog ───────────────────────────────────────────────────

class CategoryDialog(QDialog):
    """One button per choice; closing the window counts as no answer."""

    def __init__(self, title: str, text: str, choices: Sequence[str], parent=None):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setMinimumWidth(420)
        self.choice: Optional[str] = None

        layout = QVBoxLayout(self)
        label = QLabel(text)
        label.setWordWrap(True)
        layout.addWidget(label)

        row = QHBoxLayout()
        for choice in choices:
            btn = QPushButton(choice)
            btn.clicked.connect(lambda _checked=False, c=choice: self._pick(c))
            if choice == CANCEL_CHOICE:
                btn.setAutoDefault(False)
            row.addWidget(btn)
        layout.addLayout(row)

    def _pick(self, choice: str):
        self.choice = choice
        if choice == CANCEL_CHOICE:
            self.reject()
        else:
            self.accept()


async def ask_category_qt(title: str, text: str, choices: Sequence[str]) -> Optional[str]:
    """Show a modal CategoryDialog and return the label picked, or None.

    QDialog.exec() runs its own Qt event loop and blocks the asyncio loop
    until the dialog closes, so no other coroutine makes progress meanwhile.
    Start concurrent work (e.g. prepare_for_modding) before or after asking.
    """
    app = QApplication.instance() or QApplication([])  # must outlive the dialog
    dlg = CategoryDialog(title, text, choices)
    dlg.exec()
    return dlg.choice

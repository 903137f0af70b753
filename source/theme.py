# theme.py
from __future__ import annotations

from PySide6.QtGui import QPalette, QColor
from PySide6.QtWidgets import QApplication


def apply_dark_theme(app: QApplication) -> None:
    app.setStyle("Fusion")

    pal = QPalette()
    for role, rgb in (
        (QPalette.Window, (20, 20, 22)),
        (QPalette.WindowText, (230, 230, 230)),
        (QPalette.Base, (14, 14, 16)),
        (QPalette.AlternateBase, (26, 26, 28)),
        (QPalette.Text, (230, 230, 230)),
        (QPalette.Button, (34, 34, 38)),
        (QPalette.ButtonText, (230, 230, 230)),
        (QPalette.Highlight, (80, 110, 170)),
        (QPalette.HighlightedText, (255, 255, 255)),
    ):
        pal.setColor(role, QColor(*rgb))
    for role in (QPalette.Text, QPalette.ButtonText, QPalette.WindowText):
        pal.setColor(QPalette.Disabled, role, QColor(140, 140, 140))
    app.setPalette(pal)

    app.setStyleSheet(
        """
        QMainWindow { background: #141416; }
        QStatusBar { color: #e0c98f; }

        QLabel#Title {
            font-size: 16px;
            font-weight: 650;
        }

        QFrame#Panel {
            background: #1b1b1f;
            border: 1px solid #2a2a30;
            border-radius: 10px;
        }

        QWidget#RowCard {
            background: #1f1f24;
            border: 1px solid #2a2a30;
            border-radius: 10px;
        }

        QSlider::groove:horizontal {
            height: 6px;
            border-radius: 3px;
            background: #121216;
            border: 1px solid #2a2a30;
        }
        QSlider::sub-page:horizontal {
            border-radius: 3px;
            background: #506eaa;
        }
        QSlider::handle:horizontal {
            width: 14px;
            margin: -5px 0;
            border-radius: 7px;
            background: #f2f2f2;
        }

        QPushButton {
            padding: 6px 10px;
            border-radius: 10px;
            border: 1px solid #2a2a30;
            background: #232329;
        }
        QPushButton:hover { background: #2a2a33; }

        QPushButton#Primary {
            background: #2c3a5a;
            border: 1px solid #3b4f7a;
        }
        QPushButton#Primary:hover { background: #34456c; }
        """
    )

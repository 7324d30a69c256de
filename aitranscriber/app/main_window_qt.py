from __future__ import annotations

try:
    from PyQt6 import QtCore, QtWidgets

    _PYQT_IMPORT_ERROR: ModuleNotFoundError | None = None
except ModuleNotFoundError as e:  # pragma: no cover - import guard path
    QtCore = None  # type: ignore[assignment]
    QtWidgets = None  # type: ignore[assignment]
    _PYQT_IMPORT_ERROR = e

AUDIO_FILE_FILTER = "Audio Files (*.wav *.mp3 *.m4a *.aac);;All Files (*)"


if QtWidgets is not None:
    class MainWindow(QtWidgets.QMainWindow):
        record_toggle_requested = QtCore.pyqtSignal()
        select_file_requested = QtCore.pyqtSignal()
        save_settings_requested = QtCore.pyqtSignal()
        open_output_requested = QtCore.pyqtSignal()

        def __init__(self) -> None:
            super().__init__()
            self.setWindowTitle("AI Transcriber")
            self.resize(820, 640)

            root = QtWidgets.QWidget(self)
            self.setCentralWidget(root)
            lay = QtWidgets.QVBoxLayout(root)
            lay.setContentsMargins(18, 16, 18, 16)
            lay.setSpacing(12)

            form = QtWidgets.QFormLayout()
            self.txt_api_key = QtWidgets.QLineEdit(root)
            self.txt_api_key.setEchoMode(QtWidgets.QLineEdit.EchoMode.Password)
            self.txt_api_key.setPlaceholderText("sk-...")
            self.txt_endpoint = QtWidgets.QLineEdit(root)
            self.txt_endpoint.setPlaceholderText("https://translate.example.com/translate (blank disables)")
            form.addRow("OpenAI API Key", self.txt_api_key)
            form.addRow("Translation URL", self.txt_endpoint)
            lay.addLayout(form)

            btn_row = QtWidgets.QHBoxLayout()
            btn_row.setSpacing(10)
            self.btn_save = QtWidgets.QPushButton("Save Settings", root)
            self.btn_record = QtWidgets.QPushButton("Start Recording", root)
            self.btn_record.setObjectName("primary")
            self.btn_select = QtWidgets.QPushButton("Transcribe Audio File...", root)
            self.btn_open_output = QtWidgets.QPushButton("Open Output Folder", root)
            for btn in (self.btn_record, self.btn_select, self.btn_open_output, self.btn_save):
                btn_row.addWidget(btn)
            btn_row.addStretch(1)
            lay.addLayout(btn_row)

            self.meter = QtWidgets.QProgressBar(root)
            self.meter.setRange(0, 100)
            self.meter.setValue(0)
            self.meter.setTextVisible(False)
            lay.addWidget(self.meter)

            lay.addWidget(QtWidgets.QLabel("Transcript", root))
            self.txt_transcript = QtWidgets.QPlainTextEdit(root)
            self.txt_transcript.setReadOnly(True)
            lay.addWidget(self.txt_transcript, 1)

            lay.addWidget(QtWidgets.QLabel("Translation", root))
            self.txt_translation = QtWidgets.QPlainTextEdit(root)
            self.txt_translation.setReadOnly(True)
            self.txt_translation.setLayoutDirection(QtCore.Qt.LayoutDirection.RightToLeft)
            lay.addWidget(self.txt_translation, 1)

            self.status_label = QtWidgets.QLabel("Status: Ready", root)
            self.status_label.setObjectName("status")
            self.status_label.setWordWrap(True)
            lay.addWidget(self.status_label)

            self.btn_record.clicked.connect(self.record_toggle_requested.emit)
            self.btn_select.clicked.connect(self.select_file_requested.emit)
            self.btn_save.clicked.connect(self.save_settings_requested.emit)
            self.btn_open_output.clicked.connect(self.open_output_requested.emit)

            self.setStyleSheet(
                """
                QMainWindow { background: #121416; color: #e8ecef; }
                QLabel { color: #b8c1c8; }
                QLabel#status { color: #a7b0b8; font-size: 13px; }
                QPlainTextEdit, QLineEdit {
                    background: #1a1e22;
                    border: 1px solid #2a3138;
                    border-radius: 8px;
                    color: #e8ecef;
                    padding: 6px;
                }
                QPushButton {
                    background: #22272d;
                    border: 1px solid #313840;
                    border-radius: 10px;
                    color: #e7edf3;
                    padding: 8px 14px;
                    font-weight: 600;
                }
                QPushButton:hover { background: #2a3037; }
                QPushButton:disabled { color: #69737c; }
                QPushButton#primary {
                    background: #c8f25f;
                    color: #172005;
                    border-color: #c8f25f;
                }
                QProgressBar {
                    background: #13181d;
                    border: 1px solid #2f3740;
                    border-radius: 6px;
                    height: 10px;
                }
                QProgressBar::chunk { background: #6ec7ff; border-radius: 6px; }
                """
            )

        def set_recording(self, recording: bool) -> None:
            self.btn_record.setText("Stop Recording" if recording else "Start Recording")
            self.btn_select.setEnabled(not recording)

        def set_busy(self, busy: bool) -> None:
            self.btn_record.setEnabled(not busy)
            self.btn_select.setEnabled(not busy)

        def set_status(self, message: str) -> None:
            self.status_label.setText(f"Status: {message}")

        def set_meter_level(self, level_0_to_100: int) -> None:
            self.meter.setValue(max(0, min(100, int(level_0_to_100))))

        def set_transcript(self, text: str) -> None:
            self.txt_transcript.setPlainText(text)
            bar = self.txt_transcript.verticalScrollBar()
            bar.setValue(bar.maximum())

        def set_translation(self, text: str) -> None:
            self.txt_translation.setPlainText(text)

        def ask_audio_file(self) -> str:
            path, _ = QtWidgets.QFileDialog.getOpenFileName(
                self,
                "Select audio file for transcription",
                "",
                AUDIO_FILE_FILTER,
            )
            return path

        def info(self, title: str, text: str) -> None:
            QtWidgets.QMessageBox.information(self, title, text)

        def warn(self, title: str, text: str) -> None:
            QtWidgets.QMessageBox.warning(self, title, text)

        def error(self, title: str, text: str) -> None:
            QtWidgets.QMessageBox.critical(self, title, text)
else:
    class MainWindow:
        def __init__(self) -> None:
            raise ModuleNotFoundError(
                "PyQt6 is required for MainWindow. Install with: python -m pip install PyQt6"
            ) from _PYQT_IMPORT_ERROR

from __future__ import annotations

import signal
import sys

from aitranscriber.app.config import output_dirs, resolve_args, save_user_config
from aitranscriber.app.diagnostics import hint_for_exception, summarize_exception
from aitranscriber.app.logging_setup import setup_app_logger
from aitranscriber.app.output import open_folder
from aitranscriber.app.runtime import RecordingController
from aitranscriber.app.services import build_app_services
from aitranscriber.app.session import FileJobOutcome, disabled_translation_note
from aitranscriber.app.state import RuntimeState, RuntimeStateTracker
from aitranscriber.audio.mic import SoundDeviceRecorder
from aitranscriber.contracts import RealtimeUpdate
from aitranscriber.nlp.translator.factory import EndpointStatus
from aitranscriber.ui.bridge import UiEvent, UpdateBus, drain_bus


def main(argv: list[str] | None = None) -> int:
    args = resolve_args(argv)
    logger, _log_dir, log_path = setup_app_logger(debug=bool(args.debug))
    logger.info("app_start", extra={"config_path": str(getattr(args, "config", "")), "argv": argv or []})

    if args.list_devices:
        print(SoundDeviceRecorder.list_devices())
        return 0

    from PyQt6 import QtCore, QtWidgets
    from aitranscriber.app.main_window_qt import MainWindow

    app = QtWidgets.QApplication(sys.argv)
    window = MainWindow()
    window.txt_api_key.setText(str(args.api_key or ""))
    window.txt_endpoint.setText(str(args.translation_endpoint or ""))

    bus = UpdateBus(maxsize=max(1, int(args.queue_maxsize)))
    state = RuntimeStateTracker()
    controller = RecordingController(args, build_app_services(args), bus, logger=logger)

    def _show_translation_hint() -> None:
        status = controller.services.translation_status
        if status != EndpointStatus.CONFIGURED:
            window.set_translation(disabled_translation_note(status))

    def _sync() -> None:
        window.set_recording(controller.recording)
        window.set_busy(state.state == RuntimeState.PROCESSING)

    def _save_settings() -> None:
        args.api_key = window.txt_api_key.text().strip()
        args.translation_endpoint = window.txt_endpoint.text().strip()
        window.txt_endpoint.setText(args.translation_endpoint)
        controller.reload_translation()
        status = controller.services.translation_status
        if status == EndpointStatus.INVALID and args.translator == "endpoint":
            window.warn(
                "Invalid Translation URL",
                "The translation service URL must start with http:// or https:// and be a valid absolute URL.",
            )
            window.set_translation(disabled_translation_note(status))
            return
        try:
            save_user_config(
                {"api_key": args.api_key, "translation_endpoint": args.translation_endpoint},
                config_path=args.config,
            )
        except (OSError, ValueError) as e:
            logger.exception("settings_save_failed")
            window.error("Settings Error", f"Unable to save settings: {e}")
            return
        logger.info("settings_saved", extra={"translation_status": status.value})
        if status == EndpointStatus.CONFIGURED:
            window.set_status("Settings saved. Translation is enabled.")
            window.set_translation("")
        else:
            window.set_status("Settings saved. Translation is disabled.")
            _show_translation_hint()

    def _toggle_recording() -> None:
        if controller.recording:
            controller.stop_recording()
            state.set_processing()
            window.set_status("Processing audio...")
            _sync()
            return
        try:
            path = controller.start_recording()
        except Exception as e:
            logger.exception("recording_start_failed")
            summary = summarize_exception(str(e))
            state.set_error(summary)
            window.error("Recording Error", f"Unable to start recording. {summary}\n{hint_for_exception(summary)}")
            _sync()
            return
        state.set_recording()
        window.set_transcript("")
        window.set_translation("")
        window.set_status(f"Recording... ({path.name})")
        _sync()

    def _select_file() -> None:
        if controller.recording:
            window.info("Recording In Progress", "Stop the current recording before selecting another audio file.")
            return
        path = window.ask_audio_file()
        if not path:
            return
        window.set_transcript("")
        window.set_translation("")
        window.set_status("Uploading to OpenAI...")
        state.set_processing()
        controller.transcribe_file(path)
        _sync()

    def _open_output() -> None:
        _, transcripts_dir = output_dirs(args)
        try:
            opened = open_folder(transcripts_dir)
            logger.info("open_output", extra={"dir": str(transcripts_dir), "opened": bool(opened)})
        except OSError as e:
            logger.exception("open_output_failed", extra={"dir": str(transcripts_dir)})
            window.error("Folder Error", f"Unable to open folder: {e}")

    def _handle_event(event: UiEvent) -> None:
        if event.kind == "update":
            update: RealtimeUpdate = event.payload
            window.set_transcript(update.full_transcript)
            if update.full_translation:
                window.set_translation(update.full_translation)
            return
        if event.kind == "failure":
            window.set_status(f"Realtime chunk failed: {event.payload}")
            return
        if event.kind == "done":
            outcome: FileJobOutcome = event.payload
            if outcome.result is not None:
                window.set_transcript(outcome.result.text)
                window.set_translation(outcome.translation_note or outcome.result.translation)
            window.set_status(outcome.status)
            if outcome.status == "Failed.":
                state.set_error(outcome.warning or outcome.status)
            else:
                state.set_stopped()
            if outcome.warning:
                window.warn("AI Transcriber", outcome.warning)
            _sync()

    def _on_tick() -> None:
        drain_bus(bus, _handle_event, max(1, int(args.max_updates_per_tick)))
        window.set_meter_level(controller.level if controller.recording else 0)

    window.record_toggle_requested.connect(_toggle_recording)
    window.select_file_requested.connect(_select_file)
    window.save_settings_requested.connect(_save_settings)
    window.open_output_requested.connect(_open_output)

    timer = QtCore.QTimer()
    timer.timeout.connect(_on_tick)
    timer.start(max(10, int(args.poll_ms)))

    def _on_about_to_quit() -> None:
        logger.info("app_quit")
        controller.shutdown()

    app.aboutToQuit.connect(_on_about_to_quit)
    signal.signal(signal.SIGINT, lambda *_: app.quit())

    _show_translation_hint()
    _sync()
    window.show()
    print(f"Logs: {log_path}")
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())

"""
Gradio UI for the voice-controlled chat demo.

Speech comes from a scripted recognizer fed by the "Say" box, so the demo
runs without a speech engine; the level meter uses the real microphone
when one is available.
"""

import threading
from datetime import datetime

import gradio as gr

from ..core import config
from ..core.capabilities import Microphone
from ..core.chat_store import DEMO_SEED, ChatStore
from ..core.executor import CommandExecutor
from ..core.models import Command, CommandResult
from ..core.runtime_config import ConfigStore
from ..interfaces.microphone import MicrophoneInput
from ..interfaces.scripted import ScriptedRecognizer
from .audio_level import AudioLevelMonitor
from .controller import ControllerCallbacks, VoiceController
from .transcript_source import TranscriptSource

MAX_LOG_LINES = 50


class VoiceChatApp:
    """Voice-controlled chat demo state behind the Gradio page."""

    def __init__(
        self,
        recognizer: ScriptedRecognizer | None = None,
        microphone: Microphone | None = None,
        store: ChatStore | None = None,
    ):
        self.recognizer = recognizer or ScriptedRecognizer()
        self.store = store or ChatStore()
        if store is None:
            self.store.seed(DEMO_SEED)
        self.config_store = ConfigStore()

        self.overlay_visible = True
        self.audio_level = 0.0
        self._transcript = ""
        self._log: list[str] = []
        self._lock = threading.Lock()

        self.controller = VoiceController(
            transcript_source=TranscriptSource(self.recognizer),
            level_monitor=AudioLevelMonitor(microphone),
            executor=CommandExecutor(self.store),
            callbacks=ControllerCallbacks(
                on_listening_start=lambda: self._append_log("🎙️ Listening"),
                on_listening_stop=lambda: self._append_log("⏹️ Stopped listening"),
                on_transcript=self._on_transcript,
                on_command_processed=self._on_command_processed,
                on_error=lambda message: self._append_log(f"⚠️ {message}"),
                on_audio_level=self._on_audio_level,
                on_overlay_control=self._on_overlay_control,
            ),
            config_store=self.config_store,
        )
        self.controller.start()

    # ------------------------------------------------------------------
    # Controller callbacks
    # ------------------------------------------------------------------
    def _append_log(self, line: str) -> None:
        with self._lock:
            timestamp = datetime.now().strftime("%H:%M:%S")
            self._log.append(f"[{timestamp}] {line}")
            del self._log[:-MAX_LOG_LINES]

    def _on_transcript(self, text: str, is_final: bool) -> None:
        with self._lock:
            self._transcript = text if is_final else f"{text}…"

    def _on_command_processed(self, command: Command, result: CommandResult) -> None:
        mark = "✅" if result.success else "❌"
        self._append_log(f"{mark} {command.type.value}/{command.action}: {result.message}")

    def _on_audio_level(self, level: float) -> None:
        self.audio_level = level

    def _on_overlay_control(self, action: str) -> None:
        if action in ("hideOverlay", "minimize", "close"):
            self.overlay_visible = False
        elif action == "showOverlay":
            self.overlay_visible = True
        self._append_log(f"🪟 Overlay: {action}")

    # ------------------------------------------------------------------
    # UI actions
    # ------------------------------------------------------------------
    def start_listening(self) -> None:
        self.controller.start_listening()

    def stop_listening(self) -> None:
        self.controller.stop_listening()

    def say(self, text: str, confidence: float) -> str:
        """Speak ``text`` into the scripted recognizer."""
        if text.strip():
            if not self.recognizer.is_active:
                self._append_log("⚠️ Not listening - press Start first")
            self.recognizer.say(text.strip(), confidence=float(confidence))
        return ""

    def type_command(self, text: str) -> str:
        if text.strip():
            self.controller.submit_text(text.strip())
        return ""

    def update_confidence_threshold(self, value: float) -> str:
        self.config_store.update(confidence_threshold=float(value))
        return f"Confidence threshold: {value:.2f}"

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def get_status(self) -> str:
        if self.controller.is_listening:
            status = "🔴 Listening"
        else:
            status = "⚪ Idle"
        overlay = "shown" if self.overlay_visible else "hidden"
        return f"{status} | level {self.audio_level:5.1f} | overlay {overlay}"

    def get_transcript(self) -> str:
        with self._lock:
            return self._transcript

    def get_log(self) -> str:
        with self._lock:
            return "\n".join(self._log)

    def get_chat_list(self) -> str:
        active = self.store.get_active_chat()
        lines = []
        for chat in self.store.chats():
            last = chat.last_message
            preview = last.content if last else "(no messages)"
            marker = "▶ " if active is not None and chat.key == active.key else "  "
            unread = f" ({chat.unread_count})" if chat.unread_count else ""
            lines.append(f"{marker}{chat.contact.display_name}{unread}: {preview}")
        return "\n".join(lines)

    def get_active_chat(self) -> str:
        chat = self.store.get_active_chat()
        if chat is None:
            return "No chat open. Say \"go to Sam's chat\"."
        lines = [f"Chat with {chat.contact.display_name}", ""]
        for message in chat.messages:
            who = "You" if message.from_self else chat.contact.display_name
            lines.append(f"{who}: {message.content}")
        return "\n".join(lines)


def create_ui(app: VoiceChatApp | None = None) -> gr.Blocks:
    """Create the Gradio UI."""
    app = app or VoiceChatApp(microphone=MicrophoneInput())

    with gr.Blocks(title="Voice-Controlled Chat") as demo:
        gr.Markdown("# 🎤 Voice-Controlled Chat")
        gr.Markdown(
            "Try: *go to Sam's chat*, *reply to the last message from Sam*, "
            "*send message See you at 8*, *tell John on my way*, *hide overlay*."
        )

        with gr.Row():
            status_text = gr.Textbox(label="Status", interactive=False, lines=1, scale=2)
            start_btn = gr.Button("🎙️ Start Listening", variant="primary", size="lg")
            stop_btn = gr.Button("⏹️ Stop Listening", variant="stop", size="lg")

        with gr.Row():
            say_box = gr.Textbox(label="Say", placeholder="Speak a command…", scale=3)
            confidence_slider = gr.Slider(
                minimum=0.0,
                maximum=1.0,
                step=0.05,
                value=0.9,
                label="Recognizer confidence",
                scale=1,
            )
        type_box = gr.Textbox(label="Type a command", placeholder="Typed commands skip the recognizer")
        transcript_box = gr.Textbox(label="Live transcript", interactive=False, lines=1)

        with gr.Row():
            with gr.Column(scale=1):
                chats_box = gr.Textbox(label="Chats", interactive=False, lines=8)
            with gr.Column(scale=1):
                active_box = gr.Textbox(label="Active chat", interactive=False, lines=8)

        log_box = gr.Textbox(label="Commands", interactive=False, lines=10, autoscroll=True)

        with gr.Accordion("⚙️ Settings", open=False):
            threshold_slider = gr.Slider(
                minimum=0.0,
                maximum=1.0,
                step=0.05,
                value=config.CONFIDENCE_THRESHOLD,
                label="Confidence threshold",
                info="Final transcripts at or below this are shown but not executed",
            )
            threshold_slider.change(fn=app.update_confidence_threshold, inputs=[threshold_slider])

        start_btn.click(fn=app.start_listening)
        stop_btn.click(fn=app.stop_listening)
        say_box.submit(fn=app.say, inputs=[say_box, confidence_slider], outputs=[say_box])
        type_box.submit(fn=app.type_command, inputs=[type_box], outputs=[type_box])

        def refresh_all():
            return (
                app.get_status(),
                app.get_transcript(),
                app.get_chat_list(),
                app.get_active_chat(),
                app.get_log(),
            )

        timer = gr.Timer(value=config.UI_REFRESH_S, active=True)
        timer.tick(
            fn=refresh_all,
            outputs=[status_text, transcript_box, chats_box, active_box, log_box],
        )

    return demo


def launch():
    """Launch the Gradio UI."""
    demo = create_ui()
    demo.launch(server_name=config.SERVER_NAME, server_port=config.SERVER_PORT, share=False)

"""
MemeAscii - Web Interface

Gradio UI for:
- Image upload and conversion (width, charset, invert, contrast)
- AI meme enhancement (Gemini / Groq)
- Copy / download / PNG export / share snippet
- Generation history (load and delete)
"""

import os
import sys
import tempfile

import gradio as gr

# Add project to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from meme_ascii.charsets import ASCII_CHARSETS, DEFAULT_CHARSET_KEY
from meme_ascii.config import CONTRAST_RANGE, CONTRAST_STEP, WIDTH_RANGE, WIDTH_STEP, ConversionOptions, Settings
from meme_ascii.errors import EmptyResponseError, MemeAsciiError
from meme_ascii.logging_conf import setup_logging
from meme_ascii.pipeline import MemeAsciiSession
from meme_ascii.rasterizer import read_image_bytes

SETTINGS = Settings.from_env()
INITIAL_OPTIONS = ConversionOptions()

CUSTOM_CSS = """
.ascii-output textarea {
    font-family: 'DejaVu Sans Mono', Menlo, 'Courier New', monospace !important;
    font-size: 8px !important;
    line-height: 1.0 !important;
    white-space: pre !important;
}
"""

COPY_JS = "(art) => { if (art) { navigator.clipboard.writeText(art); } return art; }"


def new_session() -> MemeAsciiSession:
    return MemeAsciiSession(max_history=SETTINGS.max_history)


def history_choices(session: MemeAsciiSession):
    choices = []
    for entry in session.history:
        opts = entry.options
        label = f"{entry.id[:8]} · {opts.charset_key} · w{opts.output_width} · {entry.preview[:24]}"
        choices.append((label, entry.id))
    return gr.update(choices=choices, value=None)


def _options_from_controls(width, charset_key, invert, contrast) -> ConversionOptions:
    return ConversionOptions(
        output_width=int(width),
        charset_key=charset_key or DEFAULT_CHARSET_KEY,
        invert=bool(invert),
        contrast=float(contrast),
    )


def on_upload(image_path, width, charset_key, invert, contrast, session):
    """Load a new image and convert it."""
    session = session or new_session()
    if not image_path:
        return session, session.current_art or "", history_choices(session)
    try:
        session.options = _options_from_controls(width, charset_key, invert, contrast)
        art = session.load_image(read_image_bytes(image_path))
    except MemeAsciiError as e:
        raise gr.Error(f"ASCII Generation Failed: {e}")
    return session, art, history_choices(session)


def on_settings_change(width, charset_key, invert, contrast, session):
    """Regenerate with the new control values."""
    session = session or new_session()
    try:
        session.options = _options_from_controls(width, charset_key, invert, contrast)
        art = session.regenerate() if session.has_image else (session.current_art or "")
    except MemeAsciiError as e:
        raise gr.Error(f"ASCII Generation Failed: {e}")
    return session, art, history_choices(session)


def on_enhance(session):
    """AI enhancement; the previous art stays on screen if it fails."""
    session = session or new_session()
    try:
        art = session.enhance()
    except EmptyResponseError as e:
        gr.Warning(f"AI Enhancement Failed: {e}")
        return session, session.current_art or "", history_choices(session)
    except Exception as e:
        # SDK transport errors included; shown as-is, no retry
        raise gr.Error(f"AI Enhancement Failed: {e}")
    gr.Info("Your ASCII meme has been enhanced.")
    return session, art, history_choices(session)


def on_download(session):
    session = session or new_session()
    try:
        path = session.export_text(os.path.join(tempfile.mkdtemp(prefix="meme_ascii_"), "meme-ascii.txt"))
    except MemeAsciiError as e:
        raise gr.Error(str(e))
    return path


def on_export_png(session):
    session = session or new_session()
    try:
        path = session.export_png(os.path.join(tempfile.mkdtemp(prefix="meme_ascii_"), "meme-ascii.png"))
    except MemeAsciiError as e:
        raise gr.Error(str(e))
    return path


def on_share(session):
    session = session or new_session()
    try:
        payload = session.share_payload()
    except MemeAsciiError as e:
        raise gr.Error(str(e))
    return f"{payload['title']}\n\n{payload['text']}"


def on_load_history(entry_id, session):
    session = session or new_session()
    if not entry_id:
        raise gr.Error("Pick a history entry first.")
    try:
        entry = session.load_from_history(entry_id)
    except MemeAsciiError as e:
        raise gr.Error(str(e))
    gr.Info("ASCII art and settings have been restored.")
    opts = entry.options
    return (
        session,
        entry.ascii_art,
        opts.output_width,
        opts.charset_key,
        opts.invert,
        opts.contrast,
    )


def on_delete_history(entry_id, session):
    session = session or new_session()
    if entry_id and session.delete_from_history(entry_id):
        gr.Info("History entry deleted.")
    return session, history_choices(session)


def create_interface():
    """Create the Gradio interface."""
    charset_choices = [(cs.name, key) for key, cs in ASCII_CHARSETS.items()]

    with gr.Blocks(title="MemeAscii") as app:
        session_state = gr.State(None)

        gr.HTML("""
        <div class="main-header">
            <h1>MemeAscii</h1>
            <p>Craft hilarious, AI-powered ASCII memes from your images.</p>
        </div>
        """)

        with gr.Row():
            with gr.Column(scale=1):
                image_input = gr.Image(label="Upload Image", type="filepath")

                width_slider = gr.Slider(
                    minimum=WIDTH_RANGE[0], maximum=WIDTH_RANGE[1], step=WIDTH_STEP,
                    value=INITIAL_OPTIONS.output_width,
                    label="Output Width (characters)",
                )
                charset_dropdown = gr.Dropdown(
                    choices=charset_choices,
                    value=INITIAL_OPTIONS.charset_key,
                    label="Character Set",
                )
                invert_checkbox = gr.Checkbox(
                    label="Invert Colors (light art on dark background)",
                    value=INITIAL_OPTIONS.invert,
                )
                contrast_slider = gr.Slider(
                    minimum=CONTRAST_RANGE[0], maximum=CONTRAST_RANGE[1], step=CONTRAST_STEP,
                    value=INITIAL_OPTIONS.contrast,
                    label="Contrast",
                )
                enhance_btn = gr.Button("Enhance with AI", variant="primary")

                with gr.Group():
                    download_btn = gr.Button("Download ASCII", size="sm")
                    copy_btn = gr.Button("Copy to Clipboard", size="sm")
                    png_btn = gr.Button("Export PNG", size="sm")
                    share_btn = gr.Button("Share", size="sm")
                    download_file = gr.File(label="Download", interactive=False)
                    share_text = gr.Textbox(label="Share Text", lines=4, interactive=False)

            with gr.Column(scale=2):
                ascii_output = gr.Textbox(
                    label="ASCII Art",
                    lines=30,
                    max_lines=80,
                    interactive=False,
                    elem_classes=["ascii-output"],
                )

                with gr.Accordion("Generation History", open=True):
                    history_dropdown = gr.Dropdown(choices=[], label="Past creations")
                    with gr.Row():
                        load_btn = gr.Button("Load", size="sm")
                        delete_btn = gr.Button("Delete", size="sm", variant="stop")

        controls = [width_slider, charset_dropdown, invert_checkbox, contrast_slider]

        image_input.change(
            fn=on_upload,
            inputs=[image_input] + controls + [session_state],
            outputs=[session_state, ascii_output, history_dropdown],
        )
        width_slider.release(
            fn=on_settings_change,
            inputs=controls + [session_state],
            outputs=[session_state, ascii_output, history_dropdown],
        )
        contrast_slider.release(
            fn=on_settings_change,
            inputs=controls + [session_state],
            outputs=[session_state, ascii_output, history_dropdown],
        )
        for control in (charset_dropdown, invert_checkbox):
            control.input(
                fn=on_settings_change,
                inputs=controls + [session_state],
                outputs=[session_state, ascii_output, history_dropdown],
            )

        enhance_btn.click(
            fn=on_enhance,
            inputs=[session_state],
            outputs=[session_state, ascii_output, history_dropdown],
            concurrency_limit=1,
        )
        download_btn.click(fn=on_download, inputs=[session_state], outputs=[download_file])
        png_btn.click(fn=on_export_png, inputs=[session_state], outputs=[download_file])
        share_btn.click(fn=on_share, inputs=[session_state], outputs=[share_text])
        copy_btn.click(fn=None, inputs=[ascii_output], outputs=None, js=COPY_JS)

        load_btn.click(
            fn=on_load_history,
            inputs=[history_dropdown, session_state],
            outputs=[session_state, ascii_output] + controls,
        )
        delete_btn.click(
            fn=on_delete_history,
            inputs=[history_dropdown, session_state],
            outputs=[session_state, history_dropdown],
        )

    return app


if __name__ == "__main__":
    setup_logging(SETTINGS)
    app = create_interface()
    app.launch(
        server_name="0.0.0.0",
        server_port=int(os.environ.get("GRADIO_SERVER_PORT", 7860)),
        share=False,
        css=CUSTOM_CSS,
    )

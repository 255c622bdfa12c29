"""Caption editor dialog with live preview."""

import tkinter as tk
from tkinter import ttk, colorchooser
from typing import Callable, Optional

from PIL import Image, ImageTk

from models.meme_config import MAX_FONT_SIZE, CaptionState
from utils.image_utils import compute_scale_factor


class TextEditorDialog(tk.Toplevel):
    """Sheet for typing the top/bottom text and picking size and color."""

    PREVIEW_MAX = 360

    def __init__(self, parent, caption: CaptionState,
                 render_preview: Callable[[], Optional[Image.Image]],
                 on_change: Callable[[], None],
                 on_close: Callable[[], None],
                 **kwargs):
        super().__init__(parent, **kwargs)
        self.title("Meme text")
        self.resizable(False, True)
        self.transient(parent)
        self.grab_set()

        self.caption = caption
        self._render_preview = render_preview
        self._on_change = on_change
        self._on_close = on_close
        self._preview_photo: Optional[ImageTk.PhotoImage] = None

        self._build_ui()
        self._refresh_preview()
        self.protocol("WM_DELETE_WINDOW", self._done)

    def _build_ui(self):
        self.configure(bg="#f0f0f0")
        frame = ttk.Frame(self)
        frame.pack(fill=tk.BOTH, expand=True, padx=16, pady=12)

        ttk.Label(frame, text="Enter your meme text",
                  font=("Segoe UI", 16, "bold")).pack(anchor=tk.W)
        ttk.Label(frame, text="Preview").pack(anchor=tk.W, pady=(12, 4))

        self.preview_label = ttk.Label(frame)
        self.preview_label.pack(anchor=tk.W)

        self.top_var = tk.StringVar(value=self.caption.top_text)
        self.bottom_var = tk.StringVar(value=self.caption.bottom_text)
        for label, var in (("Top text:", self.top_var), ("Bottom text:", self.bottom_var)):
            row = ttk.Frame(frame)
            row.pack(fill=tk.X, pady=(8, 0))
            ttk.Label(row, text=label, width=12, anchor=tk.W).pack(side=tk.LEFT)
            ttk.Entry(row, textvariable=var, width=32).pack(side=tk.LEFT, fill=tk.X, expand=True)
            var.trace_add("write", lambda *_: self._apply_changes())

        # Font size and color
        row = ttk.Frame(frame)
        row.pack(fill=tk.X, pady=(8, 0))
        ttk.Label(row, text="Font size:", width=12, anchor=tk.W).pack(side=tk.LEFT)
        self.size_var = tk.StringVar(value=str(int(self.caption.font_size)))
        ttk.Spinbox(row, from_=0, to=200, increment=1, width=6,
                    textvariable=self.size_var).pack(side=tk.LEFT)
        self.size_var.trace_add("write", lambda *_: self._apply_changes())

        ttk.Label(row, text="Color:").pack(side=tk.LEFT, padx=(12, 4))
        self.color_swatch = tk.Label(row, width=3, bg=self.caption.font_color,
                                     relief="solid", borderwidth=1)
        self.color_swatch.pack(side=tk.LEFT)
        ttk.Button(row, text="Pick...", command=self._pick_color).pack(side=tk.LEFT, padx=4)

        ttk.Button(frame, text="Done", style="Accent.TButton",
                   command=self._done).pack(pady=(16, 0))

    def _apply_changes(self):
        try:
            size = float(self.size_var.get())
        except ValueError:
            return  # half-typed number
        if not 0 <= size <= MAX_FONT_SIZE:
            return
        self.caption.top_text = self.top_var.get()
        self.caption.bottom_text = self.bottom_var.get()
        self.caption.font_size = size
        self._on_change()
        self._refresh_preview()

    def _pick_color(self):
        color = colorchooser.askcolor(
            initialcolor=self.caption.font_color, title="Choose text color", parent=self
        )
        if color[1]:
            self.caption.font_color = color[1]
            self.color_swatch.config(bg=color[1])
            self._on_change()
            self._refresh_preview()

    def _refresh_preview(self):
        img = self._render_preview()
        if img is None:
            self.preview_label.config(image="", text="No image selected")
            return
        scale = min(1.0, compute_scale_factor(img.width, img.height,
                                              self.PREVIEW_MAX, self.PREVIEW_MAX))
        if scale < 1.0:
            img = img.resize((max(1, int(img.width * scale)), max(1, int(img.height * scale))),
                             Image.LANCZOS)
        self._preview_photo = ImageTk.PhotoImage(img)
        self.preview_label.config(image=self._preview_photo, text="")

    def _done(self):
        self.grab_release()
        self._on_close()
        self.destroy()

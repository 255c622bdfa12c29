"""Meme canvas window: shows the captioned image at its display size."""

import logging
import os
import tkinter as tk
from tkinter import ttk, filedialog, messagebox
from PIL import Image, ImageTk
from typing import Optional

from models.errors import MemeError
from models.meme_config import CaptionState
from models.settings import AppSettings
from gui.dialogs import TextEditorDialog
from export.meme_renderer import render_meme, save_meme
from utils.image_utils import DisplaySize, display_size_for_image
from utils.templates import load_image

logger = logging.getLogger(__name__)

IMAGE_FILETYPES = [
    ("Image files", "*.png *.jpg *.jpeg *.bmp *.gif *.webp"),
    ("All files", "*.*"),
]


class MemeEditor(tk.Toplevel):
    """Canvas window for one meme: image, captions and a bottom toolbar."""

    def __init__(self, parent, settings: AppSettings,
                 image: Optional[Image.Image] = None, image_name: str = "", **kwargs):
        super().__init__(parent, **kwargs)
        self.title("Meme canvas")
        self.minsize(320, 240)

        self.settings = settings
        self.caption = CaptionState()
        self.image_name = image_name
        self._image: Optional[Image.Image] = image
        self._display_size: Optional[DisplaySize] = None
        self._photo: Optional[ImageTk.PhotoImage] = None
        self._text_dialog: Optional[TextEditorDialog] = None

        self._build_ui()

        if self._image is not None:
            # Size is computed once the window exists and knows its screen
            self.after(0, self._update_display_size)
        else:
            self.refresh()

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self):
        self.canvas_label = ttk.Label(self, anchor=tk.CENTER, padding=8)
        self.canvas_label.pack(fill=tk.BOTH, expand=True)

        toolbar = ttk.Frame(self, style="Toolbar.TFrame")
        toolbar.pack(fill=tk.X, side=tk.BOTTOM)

        pad = dict(padx=2, pady=4)
        ttk.Button(toolbar, text="Choose Photo...", style="Toolbar.TButton",
                   command=self._choose_photo).pack(side=tk.LEFT, **pad)
        ttk.Button(toolbar, text="✎ Edit Text", style="Accent.TButton",
                   command=self._edit_text).pack(side=tk.LEFT, **pad)

        ttk.Separator(toolbar, orient=tk.VERTICAL).pack(side=tk.LEFT, fill=tk.Y, padx=6, pady=4)

        ttk.Button(toolbar, text="Save Image...", style="Toolbar.TButton",
                   command=self._save_image).pack(side=tk.LEFT, **pad)
        ttk.Button(toolbar, text="Save Caption...", style="Toolbar.TButton",
                   command=self._save_caption).pack(side=tk.LEFT, **pad)
        ttk.Button(toolbar, text="Load Caption...", style="Toolbar.TButton",
                   command=self._load_caption).pack(side=tk.LEFT, **pad)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def _viewport_width(self) -> float:
        return self.settings.clamp_viewport(self.winfo_screenwidth())

    def _update_display_size(self):
        """Recompute the display size for the current image and redraw."""
        if self._image is None:
            return
        try:
            self._display_size = display_size_for_image(
                self._image, self._viewport_width(), self.settings.max_portrait_height)
        except MemeError as e:
            logger.warning("Cannot size image %s: %s", self.image_name, e)
            self._image = None
            self._display_size = None
            messagebox.showerror("Error", f"Could not display image:\n{e}", parent=self)
        self.refresh()

    def render_preview(self) -> Optional[Image.Image]:
        """Render the meme at display size, or None when there is no image."""
        if self._image is None or self._display_size is None:
            return None
        return render_meme(self._image, self.caption, self._display_size)

    def refresh(self):
        img = self.render_preview()
        if img is None:
            self._photo = None
            self.canvas_label.config(image="", text="Open a photo to start your meme")
            return
        self._photo = ImageTk.PhotoImage(img)
        self.canvas_label.config(image=self._photo, text="")

    def set_image(self, img: Image.Image, name: str):
        self._image = img
        self.image_name = name
        self.after(0, self._update_display_size)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _choose_photo(self):
        path = filedialog.askopenfilename(
            title="Select Photo", filetypes=IMAGE_FILETYPES, parent=self)
        if not path:
            return
        try:
            img = load_image(path)
        except MemeError as e:
            logger.warning("Could not open %s: %s", path, e)
            messagebox.showerror("Error", f"Could not open image:\n{e}", parent=self)
            return
        self.set_image(img, os.path.basename(path))

    def _edit_text(self):
        if self._text_dialog is not None and self._text_dialog.winfo_exists():
            self._text_dialog.lift()
            return
        self._text_dialog = TextEditorDialog(
            self,
            self.caption,
            render_preview=self.render_preview,
            on_change=self.refresh,
            on_close=self._text_dialog_closed,
        )

    def _text_dialog_closed(self):
        self._text_dialog = None
        self.refresh()

    def _save_image(self):
        if self._image is None:
            messagebox.showwarning("No Image", "Choose a photo or template first.", parent=self)
            return
        base = os.path.splitext(self.image_name)[0] or "meme"
        path = filedialog.asksaveasfilename(
            title="Save Meme",
            defaultextension=".png",
            initialfile=f"{base}_meme.png",
            filetypes=[("PNG files", "*.png")],
            parent=self,
        )
        if not path:
            return
        try:
            save_meme(render_meme(self._image, self.caption), path)
        except (OSError, ValueError) as e:
            logger.exception("Saving meme failed")
            messagebox.showerror("Error", f"Could not save image:\n{e}", parent=self)

    def _save_caption(self):
        path = filedialog.asksaveasfilename(
            title="Save Caption",
            defaultextension=".json",
            filetypes=[("JSON files", "*.json")],
            parent=self,
        )
        if not path:
            return
        try:
            self.caption.save_json(path)
        except OSError as e:
            messagebox.showerror("Error", f"Could not save caption:\n{e}", parent=self)

    def _load_caption(self):
        path = filedialog.askopenfilename(
            title="Load Caption",
            filetypes=[("JSON files", "*.json"), ("All files", "*.*")],
            parent=self,
        )
        if not path:
            return
        try:
            loaded = CaptionState.load_json(path)
        except (OSError, ValueError) as e:
            messagebox.showerror("Error", f"Could not load caption:\n{e}", parent=self)
            return
        # The text dialog holds a reference to this object, so update in place
        self.caption.update(loaded.to_dict())
        self.refresh()

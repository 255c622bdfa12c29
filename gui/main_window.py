"""Main application window: template gallery and "create your own" action."""

import logging
import os
import tkinter as tk
from tkinter import ttk, filedialog, messagebox
from PIL import ImageTk
from typing import List

from models.errors import MemeError
from models.settings import AppSettings
from gui.meme_editor import IMAGE_FILETYPES, MemeEditor
from utils.image_utils import make_thumbnail
from utils.templates import list_meme_templates, load_image, load_template

logger = logging.getLogger(__name__)


class MainWindow:
    """Top-level window listing the bundled meme templates."""

    COLUMNS = 3

    def __init__(self, root: tk.Tk, settings: AppSettings):
        self.root = root
        self.root.title("Meme generator")
        self.root.geometry("360x560")
        self.root.minsize(340, 300)

        self.settings = settings
        self._thumbnails: List[ImageTk.PhotoImage] = []

        self._build_header()
        self._build_gallery()
        self._build_status_bar()

        # Scan the template directory once the window is up
        self.root.after(100, self.refresh_templates)

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_header(self):
        header = ttk.Frame(self.root)
        header.pack(fill=tk.X, padx=12, pady=(12, 4))

        ttk.Button(header, text="📷 Create your own meme", style="Accent.TButton",
                   command=self._create_own).pack(side=tk.LEFT)

        ttk.Label(self.root, text="Use one of these memes",
                  style="Header.TLabel").pack(anchor=tk.W, padx=12, pady=(8, 4))

    def _build_gallery(self):
        container = ttk.Frame(self.root)
        container.pack(fill=tk.BOTH, expand=True, padx=12)

        canvas = tk.Canvas(container, highlightthickness=0, bg="#f0f0f0")
        scrollbar = ttk.Scrollbar(container, orient=tk.VERTICAL, command=canvas.yview)
        self.gallery = ttk.Frame(canvas)

        self.gallery.bind(
            "<Configure>",
            lambda e: canvas.configure(scrollregion=canvas.bbox("all")),
        )
        canvas.create_window((0, 0), window=self.gallery, anchor=tk.NW)
        canvas.configure(yscrollcommand=scrollbar.set)

        canvas.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)

    def _build_status_bar(self):
        status_frame = ttk.Frame(self.root, style="Status.TFrame")
        status_frame.pack(fill=tk.X, side=tk.BOTTOM)
        self.status_bar = ttk.Label(
            status_frame, text="Ready", style="Status.TLabel", padding=(8, 4)
        )
        self.status_bar.pack(fill=tk.X)

    # ------------------------------------------------------------------
    # Gallery
    # ------------------------------------------------------------------

    def refresh_templates(self):
        """Rebuild the thumbnail grid from the template directory."""
        for child in self.gallery.winfo_children():
            child.destroy()
        self._thumbnails.clear()

        try:
            names = list_meme_templates(self.settings.templates_dir,
                                        self.settings.template_prefix)
        except MemeError as e:
            logger.warning("%s", e)
            self._set_status("No template directory found")
            return

        box = self.settings.thumbnail_size
        for idx, name in enumerate(names):
            try:
                img = load_template(name, self.settings.templates_dir,
                                    self.settings.template_prefix)
                thumb = make_thumbnail(img, box)
            except MemeError as e:
                logger.warning("Skipping template %s: %s", name, e)
                continue
            photo = ImageTk.PhotoImage(thumb)
            self._thumbnails.append(photo)
            btn = tk.Button(self.gallery, image=photo, width=box, height=box,
                            relief="flat", bg="#d6d6d6", activebackground="#c8c8c8",
                            command=lambda n=name: self._open_template(n))
            row, col = divmod(idx, self.COLUMNS)
            btn.grid(row=row, column=col, padx=2, pady=2)

        self._set_status(f"{len(self._thumbnails)} templates")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _open_template(self, name: str):
        try:
            img = load_template(name, self.settings.templates_dir,
                                self.settings.template_prefix)
        except MemeError as e:
            messagebox.showerror("Error", f"Could not open template:\n{e}")
            return
        MemeEditor(self.root, self.settings, img, name)
        self._set_status(f"Editing {name}")

    def _create_own(self):
        path = filedialog.askopenfilename(title="Select Photo", filetypes=IMAGE_FILETYPES)
        if not path:
            # Start with an empty canvas; the photo can be chosen there
            MemeEditor(self.root, self.settings)
            return
        try:
            img = load_image(path)
        except MemeError as e:
            messagebox.showerror("Error", f"Could not open image:\n{e}")
            return
        MemeEditor(self.root, self.settings, img, os.path.basename(path))
        self._set_status(f"Editing {os.path.basename(path)}")

    def _set_status(self, text: str):
        self.status_bar.config(text=text)

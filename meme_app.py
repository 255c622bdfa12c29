"""Meme Generator - Entry Point."""

import sys
import os
import logging
import tkinter as tk
from tkinter import ttk

# Ensure the app directory is on the import path
app_dir = os.path.dirname(os.path.abspath(__file__))
if app_dir not in sys.path:
    sys.path.insert(0, app_dir)

from gui.main_window import MainWindow
from models.settings import AppSettings

# Colors used throughout the app
COLORS = {
    "bg": "#f0f0f0",
    "toolbar_bg": "#e2e2e2",
    "accent": "#0078D4",
    "accent_hover": "#1a86d9",
    "accent_fg": "#ffffff",
    "status_bg": "#e0e0e0",
    "text": "#1a1a1a",
    "text_secondary": "#555555",
}


def configure_styles():
    """Set up ttk theme and the custom styles the windows refer to."""
    style = ttk.Style()
    style.theme_use("clam")

    style.configure(".", font=("Segoe UI", 9), background=COLORS["bg"],
                    foreground=COLORS["text"])

    style.configure("TFrame", background=COLORS["bg"])
    style.configure("Toolbar.TFrame", background=COLORS["toolbar_bg"])
    style.configure("Status.TFrame", background=COLORS["status_bg"])

    style.configure("TLabel", background=COLORS["bg"], foreground=COLORS["text"])
    style.configure("Status.TLabel", background=COLORS["status_bg"],
                    foreground=COLORS["text_secondary"], font=("Segoe UI", 8))
    style.configure("Header.TLabel", font=("Segoe UI", 10, "bold"))

    style.configure("TButton", padding=(8, 4), font=("Segoe UI", 9))
    style.map("TButton",
              background=[("active", "#d0d0d0"), ("!active", COLORS["bg"])],
              relief=[("pressed", "sunken"), ("!pressed", "flat")])

    style.configure("Accent.TButton", background=COLORS["accent"],
                    foreground=COLORS["accent_fg"], padding=(10, 5),
                    font=("Segoe UI", 9, "bold"))
    style.map("Accent.TButton",
              background=[("active", COLORS["accent_hover"]),
                          ("!active", COLORS["accent"])],
              foreground=[("active", COLORS["accent_fg"]),
                          ("!active", COLORS["accent_fg"])])

    style.configure("Toolbar.TButton", padding=(6, 3), font=("Segoe UI", 8),
                    background=COLORS["toolbar_bg"])
    style.map("Toolbar.TButton",
              background=[("active", "#c8c8c8"), ("!active", COLORS["toolbar_bg"])],
              relief=[("pressed", "sunken"), ("!pressed", "flat")])

    style.configure("TEntry", padding=3)


def main():
    logging.basicConfig(
        level=logging.DEBUG if os.environ.get("MEME_DEBUG") == "1" else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    settings = AppSettings.from_env()

    root = tk.Tk()
    root.configure(bg=COLORS["bg"])
    configure_styles()
    app = MainWindow(root, settings)
    root.mainloop()


if __name__ == "__main__":
    main()

"""
GUI for the Sprite Sheet Creator.

The user picks any png of an image sequence and a name for the sprite sheet.
Conversion runs on a worker thread while a modal window shows progress.
"""

import threading
import tkinter as tk
from tkinter import ttk, filedialog, messagebox
import logging
from pathlib import Path
from typing import Optional

from .core import PackingConfig
from .errors import SpriteSheetError
from .logger import setup_logging
from .pipeline import ConversionReport, convert_sequence
from .sequence import default_output_name, ensure_png_suffix


class ProgressWindow(tk.Toplevel):
    """Modal window with a stage description and a progress bar."""

    def __init__(self, parent: tk.Tk):
        super().__init__(parent)
        self.title("Working...")
        self.transient(parent)
        self.resizable(False, False)

        self.description_var = tk.StringVar(value="Cropping out transparent pixels...")
        ttk.Label(self, textvariable=self.description_var).pack(padx=20, pady=(15, 5))
        self.progress_bar = ttk.Progressbar(self, length=300, maximum=1.0, mode="determinate")
        self.progress_bar.pack(padx=20, pady=(0, 15))

        self.grab_set()

    def update_progress(self, description: str, fraction: float):
        self.description_var.set(description)
        self.progress_bar["value"] = fraction


class SpriteSheetGUI:
    """Main GUI class for the Sprite Sheet Creator application."""

    def __init__(self, root: tk.Tk):
        """Initialize the GUI application."""
        self.root = root
        self.root.title("Sprite Sheet Creator Utility")
        self.root.geometry("600x300")

        self.selected_file: Optional[Path] = None
        self.output_file: Optional[Path] = None
        self.progress_window: Optional[ProgressWindow] = None

        # Setup logging
        setup_logging()
        self.logger = logging.getLogger(__name__)

        self.create_widgets()

    def create_widgets(self):
        """Create all GUI widgets."""
        main_frame = ttk.Frame(self.root, padding="10")
        main_frame.grid(row=0, column=0, sticky=(tk.W, tk.E, tk.N, tk.S))

        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(0, weight=1)
        main_frame.columnconfigure(0, weight=1)

        row = 0

        # 1. Image sequence
        ttk.Label(main_frame, text="Image sequence:").grid(row=row, column=0, sticky=tk.W)
        row += 1
        self.selected_var = tk.StringVar(value="(none)")
        ttk.Label(main_frame, textvariable=self.selected_var).grid(row=row, column=0, sticky=tk.W)
        row += 1
        ttk.Button(main_frame, text="Select", command=self.browse_sequence).grid(row=row, column=0, sticky=tk.W, pady=(5, 15))
        row += 1

        # 2. Output sprite sheet
        ttk.Label(main_frame, text="Output sprite sheet name:").grid(row=row, column=0, sticky=tk.W)
        row += 1
        self.output_var = tk.StringVar(value="(none)")
        ttk.Label(main_frame, textvariable=self.output_var).grid(row=row, column=0, sticky=tk.W)
        row += 1
        ttk.Button(main_frame, text="Select", command=self.browse_output).grid(row=row, column=0, sticky=tk.W, pady=(5, 15))
        row += 1

        # 3. Height step
        step_frame = ttk.Frame(main_frame)
        step_frame.grid(row=row, column=0, sticky=tk.W)
        ttk.Label(step_frame, text="Height step (pixels):").grid(row=0, column=0, sticky=tk.W)
        self.height_step_var = tk.IntVar(value=10)
        ttk.Entry(step_frame, textvariable=self.height_step_var, width=6).grid(row=0, column=1, padx=(5, 0))
        row += 1

        main_frame.rowconfigure(row, weight=1)
        row += 1

        ttk.Button(main_frame, text="Convert", command=self.convert).grid(row=row, column=0, sticky=tk.E)

    def browse_sequence(self):
        """Ask for any image of the sequence."""
        initial_dir = str(self.selected_file.parent) if self.selected_file else None
        path = filedialog.askopenfilename(title="Select any Image in the Image Sequence",
                                          initialdir=initial_dir,
                                          filetypes=[("PNG images", "*.png")])
        self.selected_file = Path(path) if path else None
        self.selected_var.set(str(self.selected_file) if self.selected_file else "(none)")

    def browse_output(self):
        """Ask for the sprite sheet file name, suggesting one from the sequence."""
        initial_name = "spritesheet.png"
        initial_dir = None
        if self.selected_file is not None:
            initial_name = default_output_name(self.selected_file)
            initial_dir = str(self.selected_file.parent)
        path = filedialog.asksaveasfilename(title="Specify a Name for the Sprite Sheet",
                                            initialdir=initial_dir,
                                            initialfile=initial_name,
                                            filetypes=[("PNG images", "*.png")])
        self.output_file = ensure_png_suffix(Path(path)) if path else None
        self.output_var.set(str(self.output_file) if self.output_file else "(none)")

    def validate_inputs(self) -> bool:
        if self.selected_file is None:
            messagebox.showerror("Error", "You must select an image from an image sequence")
            return False
        if self.output_file is None:
            messagebox.showerror("Error", "You must specify a file name for the output sprite sheet")
            return False
        try:
            if self.height_step_var.get() <= 0:
                raise ValueError("Height step must be positive")
        except (tk.TclError, ValueError):
            messagebox.showerror("Error", "Height step must be a positive integer.")
            return False
        return True

    def convert(self):
        """Start the conversion on a worker thread."""
        if not self.validate_inputs():
            return

        config = PackingConfig(height_step=self.height_step_var.get())
        self.progress_window = ProgressWindow(self.root)

        worker = threading.Thread(target=self._run_conversion, args=(config,), daemon=True)
        worker.start()

    def _report_progress(self, description: str, fraction: float):
        # Called on the worker thread; hand off to Tk and return immediately.
        self.root.after(0, self._apply_progress, description, fraction)

    def _apply_progress(self, description: str, fraction: float):
        if self.progress_window is not None:
            self.progress_window.update_progress(description, fraction)

    def _run_conversion(self, config: PackingConfig):
        try:
            report = convert_sequence(self.selected_file, self.output_file, config,
                                      progress=self._report_progress)
        except SpriteSheetError as e:
            self.logger.error(f"Conversion failed: {e}")
            self.root.after(0, self._finish, None, str(e))
            return
        except Exception as e:
            self.logger.error(f"Conversion failed: {e}", exc_info=True)
            self.root.after(0, self._finish, None, f"Unexpected error: {e}")
            return
        self.root.after(0, self._finish, report, None)

    def _finish(self, report: Optional[ConversionReport], error: Optional[str]):
        if self.progress_window is not None:
            self.progress_window.grab_release()
            self.progress_window.destroy()
            self.progress_window = None

        if error is not None:
            messagebox.showerror("Error", error)
            return

        result = report.result
        message = (f"Sprite sheet: {report.sheet_path}\n"
                   f"Metadata: {report.metadata_path}\n\n"
                   f"Sheet size: {result.used_width} x {result.used_height} pixels\n"
                   f"Frames: {len(result.placements)}")
        if report.errors:
            message += f"\n\n{len(report.errors)} file(s) could not be read and were skipped."
        messagebox.showinfo("Sprite Sheet Created", message)


def run_gui():
    root = tk.Tk()
    SpriteSheetGUI(root)
    root.mainloop()

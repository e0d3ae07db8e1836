import logging
import threading
from pathlib import Path

import customtkinter as ctk
from tkinter import filedialog, messagebox

from .cipher import Mode
from .config import CipherSettings, IVMode
from .errors import CoreError
from .files import ENC_SUFFIX, decrypt_file, default_output_path, encrypt_file

logger = logging.getLogger(__name__)

# format selector label -> IV mode, and the line shown under the selector
FORMAT_LABELS = {
    "Legacy (zero IV)": IVMode.ZERO,
    "Salted header": IVMode.RANDOM,
}
FORMAT_NOTES = {
    IVMode.ZERO: "Raw AES-256-CBC, zero IV, no salt. Same password + same file = same output.",
    IVMode.RANDOM: "FEC1 header with a random salt and IV per file. Decrypt with this format selected.",
}


def _label_for(iv_mode: IVMode) -> str:
    return next(label for label, mode in FORMAT_LABELS.items() if mode is iv_mode)


class FileEncryptionApp(ctk.CTk):
    """Window front end mirroring ``file-encrypt -e|-d -p -i -o --iv-mode``."""

    def __init__(self, settings: CipherSettings = None):
        super().__init__()
        self.title("file-encrypt — AES-256-CBC")
        self.geometry("720x460")

        self.settings = settings or CipherSettings()
        self.busy = threading.Lock()

        self._build_ui()

    # ---------- UI layout ----------
    def _build_ui(self):
        self.grid_columnconfigure(1, weight=1)
        row = 0
        for label, attr, browse in (
            ("Input file", "in_entry", self._browse_input),
            ("Output file", "out_entry", self._browse_output),
        ):
            ctk.CTkLabel(self, text=label).grid(row=row, column=0, padx=(16, 8), pady=(12, 4), sticky="w")
            entry = ctk.CTkEntry(self)
            entry.grid(row=row, column=1, padx=0, pady=(12, 4), sticky="ew")
            ctk.CTkButton(self, text="Browse…", width=90, command=browse).grid(
                row=row, column=2, padx=(8, 16), pady=(12, 4))
            setattr(self, attr, entry)
            row += 1
        self.out_entry.configure(placeholder_text="<input>.enc / <input without .enc> when empty")

        ctk.CTkLabel(self, text="Password").grid(row=row, column=0, padx=(16, 8), pady=4, sticky="w")
        self.pw_entry = ctk.CTkEntry(self, show="*")
        self.pw_entry.grid(row=row, column=1, columnspan=2, padx=(0, 16), pady=4, sticky="ew")
        row += 1

        ctk.CTkLabel(self, text="Format").grid(row=row, column=0, padx=(16, 8), pady=4, sticky="w")
        self.format_picker = ctk.CTkSegmentedButton(
            self, values=list(FORMAT_LABELS), command=self._on_format)
        self.format_picker.set(_label_for(self.settings.iv_mode))
        self.format_picker.grid(row=row, column=1, columnspan=2, padx=(0, 16), pady=4, sticky="w")
        row += 1
        self.format_note = ctk.CTkLabel(self, text=FORMAT_NOTES[self.settings.iv_mode], anchor="w")
        self.format_note.grid(row=row, column=1, columnspan=2, padx=(0, 16), sticky="ew")
        row += 1

        buttons = ctk.CTkFrame(self, fg_color="transparent")
        buttons.grid(row=row, column=0, columnspan=3, pady=12)
        self.encrypt_btn = ctk.CTkButton(buttons, text="Encrypt (-e)", command=lambda: self._start(Mode.ENCRYPT))
        self.decrypt_btn = ctk.CTkButton(buttons, text="Decrypt (-d)", command=lambda: self._start(Mode.DECRYPT))
        self.encrypt_btn.pack(side="left", padx=8)
        self.decrypt_btn.pack(side="left", padx=8)
        row += 1

        self.grid_rowconfigure(row, weight=1)
        self.status = ctk.CTkTextbox(self, state="disabled")
        self.status.grid(row=row, column=0, columnspan=3, padx=16, pady=(0, 16), sticky="nsew")

    # ---------- Helpers ----------
    def _report(self, msg: str):
        logger.info(msg)
        self.status.configure(state="normal")
        self.status.insert("end", msg + "\n")
        self.status.see("end")
        self.status.configure(state="disabled")

    def _on_format(self, label: str):
        self.format_note.configure(text=FORMAT_NOTES[FORMAT_LABELS[label]])

    def _selected_settings(self) -> CipherSettings:
        return CipherSettings(iterations=self.settings.iterations,
                              iv_mode=FORMAT_LABELS[self.format_picker.get()])

    def _browse_input(self):
        path = filedialog.askopenfilename(title="File to encrypt or decrypt")
        if path:
            self.in_entry.delete(0, "end")
            self.in_entry.insert(0, path)

    def _browse_output(self):
        path = filedialog.asksaveasfilename(title="Write result to")
        if path:
            self.out_entry.delete(0, "end")
            self.out_entry.insert(0, path)

    def _set_working(self, working: bool):
        state = "disabled" if working else "normal"
        for widget in (self.encrypt_btn, self.decrypt_btn, self.format_picker):
            widget.configure(state=state)

    # ---------- Encrypt/Decrypt flows ----------
    def _start(self, mode: Mode):
        in_text = self.in_entry.get().strip()
        password = self.pw_entry.get()
        if not in_text:
            messagebox.showwarning("Missing input", "Choose an input file first.")
            return
        if not password:
            messagebox.showwarning("Missing password", "Enter a password.")
            return

        in_path = Path(in_text)
        out_text = self.out_entry.get().strip()
        out_path = Path(out_text) if out_text else default_output_path(in_path, mode)
        if mode is Mode.DECRYPT and in_path.suffix.lower() != ENC_SUFFIX:
            if not messagebox.askyesno("Decrypt?", f"{in_path.name} does not end with {ENC_SUFFIX}. Decrypt anyway?"):
                return
        if out_path.exists():
            if not messagebox.askyesno("Overwrite?", f"{out_path} exists. Replace it?"):
                return
        if not self.busy.acquire(blocking=False):
            return

        settings = self._selected_settings()
        self._set_working(True)
        self._report(f"{mode.value} [{settings.iv_mode.value}]: {in_path} -> {out_path}")
        threading.Thread(target=self._job, args=(mode, in_path, out_path, password, settings),
                         daemon=True).start()

    def _job(self, mode: Mode, in_path: Path, out_path: Path, password: str, settings: CipherSettings):
        op = encrypt_file if mode is Mode.ENCRYPT else decrypt_file
        try:
            written = op(in_path, out_path, password, settings)
        except (CoreError, OSError) as e:
            self.after(0, self._finish, False, f"{type(e).__name__}: {e}")
        else:
            self.after(0, self._finish, True, f"{mode.value.capitalize()}ed: {written}")
        finally:
            self.busy.release()

    def _finish(self, ok: bool, msg: str):
        self._set_working(False)
        self._report(msg)
        if ok:
            messagebox.showinfo("Done", msg)
        else:
            messagebox.showerror("Failed", msg)


def main(environ=None):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    try:
        settings = CipherSettings.from_env(environ)
    except ValueError as e:
        logger.warning("Ignoring environment settings, using defaults: %s", e)
        settings = CipherSettings()
    FileEncryptionApp(settings).mainloop()


if __name__ == "__main__":
    main()

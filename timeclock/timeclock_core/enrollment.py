"""
Backend sign-in dialog. Optional: the widget works offline without it.
"""

import tkinter as tk
import requests

from .api import sign_in
from .config import log, save_config
from .constants import THEME, DEFAULT_SERVER_URL


def _entry(parent, var, show=None):
    entry = tk.Entry(parent, textvariable=var, font=("Segoe UI", 12), show=show,
                     bg=THEME["bg_input"], fg=THEME["text_primary"],
                     insertbackground=THEME["text_primary"],
                     relief="solid", borderwidth=1,
                     highlightbackground=THEME["border"],
                     highlightcolor=THEME["primary"])
    entry.pack(fill="x", pady=(4, 14))
    return entry


def gui_sign_in():
    """
    Ask for server, email and password. Returns a saved config dict,
    or None if the user skipped (offline mode).
    """
    result = {"config": None}

    root = tk.Tk()
    root.title("Time Clock — Sign in")
    root.geometry("440x420")
    root.resizable(False, False)
    root.configure(bg=THEME["bg_darkest"])

    header = tk.Frame(root, bg=THEME["header_bg"], height=70)
    header.pack(fill="x")
    header.pack_propagate(False)
    tk.Label(header, text="HR Portal Time Clock",
             font=("Segoe UI", 14, "bold"), fg="white",
             bg=THEME["header_bg"]).pack(expand=True)

    body = tk.Frame(root, bg=THEME["bg_darkest"], padx=35, pady=20)
    body.pack(fill="both", expand=True)

    fields = {}
    for label, key, default, show in (
        ("Server URL", "url", DEFAULT_SERVER_URL, None),
        ("Email", "email", "", None),
        ("Password", "password", "", "•"),
    ):
        tk.Label(body, text=label, font=("Segoe UI", 11, "bold"),
                 bg=THEME["bg_darkest"], fg=THEME["text_primary"]).pack(anchor="w")
        fields[key] = tk.StringVar(value=default)
        _entry(body, fields[key], show=show)

    status = tk.Label(body, text="", font=("Segoe UI", 10), bg=THEME["bg_darkest"])
    status.pack(pady=(0, 8))

    def on_sign_in():
        url = fields["url"].get().strip()
        email = fields["email"].get().strip()
        password = fields["password"].get()
        if not url or not email or not password:
            status.config(text="All fields are required.", fg=THEME["error"])
            return

        status.config(text="Signing in...", fg=THEME["primary"])
        root.update()

        try:
            config = sign_in(url, email, password)
            save_config(config)
            result["config"] = config
            status.config(text="Signed in!", fg=THEME["success"])
            root.after(600, root.quit)
        except requests.ConnectionError:
            status.config(text=f"Cannot connect to {url}. Check network.", fg=THEME["error"])
        except (requests.RequestException, RuntimeError, ValueError) as e:
            log.warning("Sign-in failed: %s", e)
            status.config(text=f"Error: {str(e)[:80]}", fg=THEME["error"])

    row = tk.Frame(body, bg=THEME["bg_darkest"])
    row.pack(fill="x")
    tk.Button(row, text="Sign in", font=("Segoe UI", 12, "bold"),
              bg=THEME["primary"], fg="white",
              activebackground=THEME["primary_hover"], activeforeground="white",
              relief="flat", padx=20, pady=8, cursor="hand2",
              command=on_sign_in).pack(side="left", fill="x", expand=True)
    tk.Button(row, text="Work offline", font=("Segoe UI", 11),
              bg=THEME["bg_card"], fg=THEME["text_muted"],
              relief="flat", padx=12, pady=8, cursor="hand2",
              command=root.quit).pack(side="left", padx=(10, 0))

    root.protocol("WM_DELETE_WINDOW", root.quit)
    root.mainloop()
    root.destroy()
    return result["config"]

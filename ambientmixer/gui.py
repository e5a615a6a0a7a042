"""
Desktop front end for the Ambient Mixer.
"""

import asyncio
import logging
import threading
import tkinter as tk
from tkinter import messagebox
from typing import Any, Callable, Dict, List

import customtkinter as ctk

from .audio import PlaybackEngine
from .catalog import SoundCatalog
from .constants import (
    COLORS,
    FONTS,
    MIXER,
    UI,
    darken_color,
    generate_color_gradient,
    get_text_color_for_bg,
    lighten_color,
)
from .mixer import MixerEngine
from .models import Preset, SoundDefinition
from .presets import PresetStore
from .storage import JsonFileStorage
from .view import MixerView

logger = logging.getLogger(__name__)

PLAY_SYMBOL = "▶"
PAUSE_SYMBOL = "⏸"


class MixerApp(MixerView):
    """
    Main GUI application.

    The engine lives on a private asyncio loop running in a background thread.
    Widget events are submitted to that loop and view callbacks coming back
    from the engine are re-scheduled on the Tk main loop, so engine state is
    only ever touched from one thread.
    """

    def __init__(self):
        ctk.set_appearance_mode("dark")
        self.root = ctk.CTk()
        self.root.title(UI["window_title"])
        self.root.geometry(UI["window_size"])
        self.root.configure(fg_color=COLORS["bg_darkest"])

        self._loop = asyncio.new_event_loop()
        self._loop_thread = threading.Thread(target=self._loop.run_forever, daemon=True)
        self._loop_thread.start()

        self.catalog = SoundCatalog()
        self.playback = PlaybackEngine()
        presets = PresetStore(JsonFileStorage()) if MIXER["presets_enabled"] else None
        self.engine = MixerEngine(self.catalog, self.playback, presets=presets, view=self)

        # Per-sound widgets: sound_id -> widget
        self.sound_cards: Dict[str, Any] = {}
        self.play_buttons: Dict[str, Any] = {}
        self.volume_sliders: Dict[str, Any] = {}
        self.volume_labels: Dict[str, Any] = {}
        self.volume_bars: Dict[str, Any] = {}
        self.custom_preset_buttons: Dict[str, Any] = {}

        self._font_sm = ctk.CTkFont(family=FONTS["family_text"], size=FONTS["size_sm"])
        self._font_md_bold = ctk.CTkFont(
            family=FONTS["family_text"], size=FONTS["size_md"], weight="bold"
        )
        self._font_icon = ctk.CTkFont(family=FONTS["family"], size=FONTS["size_xxl"])
        self._font_xl_bold = ctk.CTkFont(
            family=FONTS["family_text"], size=FONTS["size_xl"], weight="bold"
        )

        self._create_ui()
        self._call(self.engine.start)

        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

    # ------------------------------------------------------------------
    # Thread plumbing
    # ------------------------------------------------------------------

    def _call(self, func: Callable, *args):
        """Run a synchronous engine call on the engine loop."""
        self._loop.call_soon_threadsafe(func, *args)

    def _submit(self, coro):
        """Run an engine coroutine on the engine loop, logging any failure."""
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        future.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(future):
        if not future.cancelled() and future.exception() is not None:
            logger.error("Mixer task failed: %s", future.exception())

    def _on_ui(self, func: Callable, *args):
        """Schedule a widget update on the Tk main loop."""
        try:
            self.root.after(0, lambda: func(*args))
        except RuntimeError:
            pass  # Main loop not running (app closing)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _create_ui(self):
        """Build the main user interface."""
        main_frame = ctk.CTkFrame(self.root, fg_color=COLORS["bg_darkest"], corner_radius=0)
        main_frame.pack(fill=tk.BOTH, expand=True, padx=UI["padding"], pady=UI["padding"])

        title = ctk.CTkLabel(
            main_frame,
            text=UI["window_title"],
            font=self._font_xl_bold,
            text_color=COLORS["text_primary"],
        )
        title.pack(anchor="w", pady=(0, UI["padding"]))

        self._create_controls(main_frame)
        self._create_presets_bar(main_frame)

        self.cards_frame = ctk.CTkScrollableFrame(main_frame, fg_color=COLORS["bg_dark"])
        self.cards_frame.pack(fill=tk.BOTH, expand=True, pady=(UI["padding"], 0))
        for col in range(UI["grid_columns"]):
            self.cards_frame.grid_columnconfigure(col, weight=1)

    def _create_controls(self, parent):
        """Master volume, play/pause all, reset and save preset."""
        controls = ctk.CTkFrame(parent, fg_color=COLORS["bg_dark"], corner_radius=UI["corner_radius"])
        controls.pack(fill=tk.X)

        ctk.CTkLabel(
            controls, text="Master", font=self._font_md_bold, text_color=COLORS["text_secondary"]
        ).pack(side=tk.LEFT, padx=(UI["padding"], 6), pady=UI["padding"])

        self.master_slider = ctk.CTkSlider(
            controls,
            from_=MIXER["min_volume"],
            to=MIXER["max_volume"],
            number_of_steps=MIXER["max_volume"],
            command=self._on_master_slider,
            button_color=COLORS["accent"],
            progress_color=COLORS["accent"],
        )
        self.master_slider.set(MIXER["master_volume"])
        self.master_slider.pack(side=tk.LEFT, fill=tk.X, expand=True, padx=6)

        self.master_label = ctk.CTkLabel(
            controls, text=f"{MIXER['master_volume']}%", width=48, font=self._font_sm
        )
        self.master_label.pack(side=tk.LEFT, padx=6)

        self.play_all_button = ctk.CTkButton(
            controls,
            text=f"{PLAY_SYMBOL} Play All",
            width=120,
            fg_color=COLORS["green"],
            hover_color=COLORS["green_hover"],
            corner_radius=UI["button_corner_radius"],
            command=lambda: self._submit(self.engine.toggle_all()),
        )
        self.play_all_button.pack(side=tk.LEFT, padx=6)

        ctk.CTkButton(
            controls,
            text="Reset",
            width=80,
            fg_color=COLORS["red"],
            hover_color=COLORS["red_hover"],
            corner_radius=UI["button_corner_radius"],
            command=lambda: self._call(self.engine.reset),
        ).pack(side=tk.LEFT, padx=6)

        if self.engine.presets_enabled:
            ctk.CTkButton(
                controls,
                text="Save Preset",
                width=110,
                fg_color=COLORS["accent"],
                hover_color=COLORS["accent_hover"],
                corner_radius=UI["button_corner_radius"],
                command=lambda: self._call(self.engine.request_save_preset),
            ).pack(side=tk.LEFT, padx=(6, UI["padding"]))

    def _create_presets_bar(self, parent):
        """Built-in preset buttons plus a row for saved presets."""
        bar = ctk.CTkFrame(parent, fg_color="transparent")
        bar.pack(fill=tk.X, pady=(UI["padding"], 0))

        ctk.CTkLabel(
            bar, text="Presets", font=self._font_md_bold, text_color=COLORS["text_secondary"]
        ).pack(side=tk.LEFT, padx=(0, 8))

        for preset_id, preset in self.catalog.presets.items():
            self._make_preset_button(bar, preset_id, preset, COLORS["bg_light"]).pack(
                side=tk.LEFT, padx=4
            )

        self.custom_presets_frame = ctk.CTkFrame(parent, fg_color="transparent")
        self.custom_presets_frame.pack(fill=tk.X, pady=(6, 0))

    def _make_preset_button(self, parent, preset_id: str, preset: Preset, color: str):
        return ctk.CTkButton(
            parent,
            text=preset.name,
            width=90,
            fg_color=color,
            hover_color=lighten_color(color, 0.1),
            text_color=get_text_color_for_bg(color),
            corner_radius=UI["button_corner_radius"],
            command=lambda: self._submit(self.engine.load_preset(preset_id)),
        )

    def _build_sound_card(self, index: int, sound: SoundDefinition):
        row, col = divmod(index, UI["grid_columns"])
        card = ctk.CTkFrame(
            self.cards_frame,
            fg_color=COLORS["bg_medium"],
            corner_radius=UI["corner_radius"],
            border_width=2,
            border_color=COLORS["bg_medium"],
        )
        card.grid(row=row, column=col, sticky="nsew", padx=6, pady=6)

        header = ctk.CTkFrame(card, fg_color="transparent")
        header.pack(fill=tk.X, padx=UI["card_padding"], pady=(UI["card_padding"], 4))

        icon = ctk.CTkLabel(
            header,
            text=sound.emoji,
            width=UI["icon_size"],
            height=UI["icon_size"],
            corner_radius=UI["icon_size"] // 2,
            fg_color=darken_color(sound.color, 0.1),
            font=self._font_icon,
        )
        icon.pack(side=tk.LEFT)

        play_btn = ctk.CTkButton(
            header,
            text=PLAY_SYMBOL,
            width=36,
            height=36,
            corner_radius=18,
            fg_color=COLORS["bg_light"],
            hover_color=COLORS["bg_lighter"],
            command=lambda: self._submit(self.engine.toggle_sound(sound.id)),
        )
        play_btn.pack(side=tk.RIGHT)

        ctk.CTkLabel(
            card, text=sound.name, font=self._font_md_bold, text_color=COLORS["text_primary"]
        ).pack(anchor="w", padx=UI["card_padding"])
        ctk.CTkLabel(
            card, text=sound.description, font=self._font_sm, text_color=COLORS["text_muted"]
        ).pack(anchor="w", padx=UI["card_padding"])

        volume_row = ctk.CTkFrame(card, fg_color="transparent")
        volume_row.pack(fill=tk.X, padx=UI["card_padding"], pady=(6, 0))

        start_color, end_color = generate_color_gradient(sound.color, lighten_color(sound.color), 2)
        slider = ctk.CTkSlider(
            volume_row,
            from_=MIXER["min_volume"],
            to=MIXER["max_volume"],
            number_of_steps=MIXER["max_volume"],
            button_color=end_color,
            progress_color=start_color,
            command=lambda value: self._call(self.engine.set_sound_volume, sound.id, int(value)),
        )
        slider.set(0)
        slider.pack(side=tk.LEFT, fill=tk.X, expand=True)

        value_label = ctk.CTkLabel(volume_row, text="0", width=32, font=self._font_sm)
        value_label.pack(side=tk.LEFT, padx=(6, 0))

        bar = ctk.CTkProgressBar(card, height=6, progress_color=start_color)
        bar.set(0)
        bar.pack(fill=tk.X, padx=UI["card_padding"], pady=(6, UI["card_padding"]))

        self.sound_cards[sound.id] = card
        self.play_buttons[sound.id] = play_btn
        self.volume_sliders[sound.id] = slider
        self.volume_labels[sound.id] = value_label
        self.volume_bars[sound.id] = bar

    def _on_master_slider(self, value):
        self._call(self.engine.set_master_volume, int(value))

    # ------------------------------------------------------------------
    # MixerView callbacks (called on the engine loop)
    # ------------------------------------------------------------------

    def render_sounds(self, sounds: List[SoundDefinition]):
        def build():
            for index, sound in enumerate(sounds):
                self._build_sound_card(index, sound)

        self._on_ui(build)

    def render_presets(self, presets: Dict[str, Preset]):
        for preset_id, preset in presets.items():
            self.add_preset(preset_id, preset)

    def add_preset(self, preset_id: str, preset: Preset):
        def add():
            if preset_id in self.custom_preset_buttons:
                return
            button = self._make_preset_button(
                self.custom_presets_frame, preset_id, preset, COLORS["accent"]
            )
            button.pack(side=tk.LEFT, padx=4)
            self.custom_preset_buttons[preset_id] = button

        self._on_ui(add)

    def update_sound_playing(self, sound_id: str, is_playing: bool):
        def update():
            button = self.play_buttons.get(sound_id)
            card = self.sound_cards.get(sound_id)
            if button is None or card is None:
                logger.error("Could not find card for sound: %s", sound_id)
                return
            button.configure(text=PAUSE_SYMBOL if is_playing else PLAY_SYMBOL)
            card.configure(border_color=COLORS["playing"] if is_playing else COLORS["bg_medium"])

        self._on_ui(update)

    def update_sound_volume(self, sound_id: str, volume: int):
        def update():
            if sound_id not in self.volume_sliders:
                return
            self.volume_sliders[sound_id].set(volume)
            self.volume_labels[sound_id].configure(text=str(volume))
            self.volume_bars[sound_id].set(volume / MIXER["max_volume"])

        self._on_ui(update)

    def update_master_volume(self, volume: int):
        def update():
            self.master_slider.set(volume)
            self.master_label.configure(text=f"{volume}%")

        self._on_ui(update)

    def update_main_play_button(self, any_playing: bool):
        def update():
            if any_playing:
                self.play_all_button.configure(
                    text=f"{PAUSE_SYMBOL} Pause All",
                    fg_color=COLORS["red"],
                    hover_color=COLORS["red_hover"],
                )
            else:
                self.play_all_button.configure(
                    text=f"{PLAY_SYMBOL} Play All",
                    fg_color=COLORS["green"],
                    hover_color=COLORS["green_hover"],
                )

        self._on_ui(update)

    def show_save_prompt(self):
        def prompt():
            dialog = ctk.CTkInputDialog(text="Preset name:", title="Save Preset")
            name = dialog.get_input()
            if name is None:  # cancelled
                return
            self._call(self.engine.save_preset, name)

        self._on_ui(prompt)

    def show_notice(self, message: str):
        self._on_ui(messagebox.showwarning, "Ambient Mixer", message)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _on_close(self):
        """Handle application close."""
        self._call(self.playback.close)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self.root.destroy()

    def run(self):
        """Start the application main loop."""
        self.root.mainloop()

"""
ScenarioController — session state owner for a front end.

Holds the current mode, seed and Scenario and turns user actions (Next
button, mode/seed change, key presses, JSON commands, shared links) into
calls to ``build_scenario``. Communicates with the renderer through:
  - pending_events : render commands ({"type": "scenario", ...}, {"type": "redraw"})
  - status_msg     : one-line user feedback
  - info_msg       : key help shown by the renderer
"""

import json
import logging
from typing import Optional

from rack import MODES
from rng import SeedLike, parse_seed, random_seed
from scenario import Scenario, build_scenario, parse_share_query, share_query

logger = logging.getLogger(__name__)


DEFAULT_INFO_MSG = "[N] Next scenario  [B] Toggle numbers"


class ScenarioController:
    """Current scenario + the actions that replace it."""

    DEFAULT_MODE = "8"

    def __init__(self, mode: str = DEFAULT_MODE, seed: SeedLike = None,
                 text_seeds: bool = False):
        self.text_seeds   = text_seeds
        self.show_numbers = True
        self.scenario: Optional[Scenario] = None

        self.status_msg = ""
        self.info_msg   = DEFAULT_INFO_MSG

        # Render commands for the presentation layer
        self.pending_events: list[dict] = []

        self.mode = mode if mode in MODES else self.DEFAULT_MODE
        if seed is None:
            self._rebuild(None)
        else:
            self.set_seed(seed)

    # ──────────────────────────────────────────────────────────────────────────
    # Build helpers
    # ──────────────────────────────────────────────────────────────────────────

    @property
    def seed(self) -> Optional[int]:
        return self.scenario.seed if self.scenario else None

    def _rebuild(self, seed: SeedLike, keep_rack: bool = False,
                 keep_cue: bool = False) -> Scenario:
        self.scenario = build_scenario(
            self.mode, seed,
            keep_rack=keep_rack, keep_cue=keep_cue,
            previous=self.scenario, text_seeds=self.text_seeds,
        )
        if self.scenario.degraded:
            self.status_msg = (
                f"Crowded layout: fallback spot used for ball(s) "
                f"{', '.join(str(n) for n in self.scenario.fallback_numbers)}"
            )
        self.pending_events.append({"type": "scenario", "scenario": self.scenario})
        return self.scenario

    # ──────────────────────────────────────────────────────────────────────────
    # User actions
    # ──────────────────────────────────────────────────────────────────────────

    def next_scenario(self) -> Scenario:
        """Next button: fresh random seed, full rebuild."""
        self.status_msg = ""
        return self._rebuild(random_seed())

    def set_mode(self, mode: str) -> Optional[Scenario]:
        mode = str(mode).strip()
        if mode not in MODES:
            self.status_msg = f"Unknown mode '{mode}'. Use 8 or 9."
            logger.info("rejected mode %r", mode)
            return None
        self.mode = mode
        self.status_msg = ""
        return self._rebuild(self.seed)

    def set_seed(self, value: SeedLike) -> Scenario:
        if parse_seed(value) is None and not (self.text_seeds and str(value or "").strip()):
            self.status_msg = "Invalid seed, using a random one."
        else:
            self.status_msg = ""
        return self._rebuild(value)

    def reroll_cue(self) -> Scenario:
        """Keep the object balls, place a new cue ball."""
        self.status_msg = ""
        return self._rebuild(random_seed(), keep_rack=True)

    def reroll_rack(self) -> Scenario:
        """Keep the cue ball, rack and scatter a new set of object balls."""
        self.status_msg = ""
        return self._rebuild(random_seed(), keep_cue=True)

    def toggle_numbers(self) -> None:
        self.show_numbers = not self.show_numbers
        self.pending_events.append({"type": "redraw", "show_numbers": self.show_numbers})

    def handle_key(self, key: str) -> None:
        key = (key or "").lower()
        if key == "n":
            self.next_scenario()
        elif key == "b":
            self.toggle_numbers()

    # ──────────────────────────────────────────────────────────────────────────
    # Share links
    # ──────────────────────────────────────────────────────────────────────────

    def share_query(self) -> Optional[str]:
        """Query string for the current layout, or None for a kept-rack/kept-cue one."""
        query = share_query(self.scenario)
        if query is None:
            self.status_msg = "This layout keeps balls from an earlier seed and cannot be shared."
        return query

    def load_from_query(self, query: str) -> Scenario:
        """Apply a shared ``mode=..&seed=..`` pair; missing parts keep current values."""
        mode, seed = parse_share_query(query)
        if mode is not None:
            self.mode = mode
        self.status_msg = ""
        return self._rebuild(seed if seed is not None else self.seed)

    # ──────────────────────────────────────────────────────────────────────────
    # JSON commands
    # ──────────────────────────────────────────────────────────────────────────

    def get_state_json(self) -> str:
        """Current scenario as compact JSON."""
        state = self.scenario.to_dict()
        state["show_numbers"] = self.show_numbers
        return json.dumps(state, separators=(',', ':'))

    def execute_command(self, text: str) -> None:
        """Parse a JSON command string and dispatch it."""
        if not text:
            self.status_msg = "Empty command."
            return
        try:
            data = json.loads(text.replace('\r', ''))
        except json.JSONDecodeError as exc:
            logger.info("command JSON parse error: %s", exc)
            self.status_msg = f"JSON error: {exc}"
            return
        if not isinstance(data, dict):
            self.status_msg = "Command must be a JSON object."
            return

        cmd = str(data.get("cmd", "")).lower().strip()
        logger.debug("execute_command cmd=%s", cmd)
        if cmd == "set":
            self._cmd_set(data)
        elif cmd == "next":
            self.next_scenario()
        elif cmd == "keep":
            self._cmd_keep(data)
        elif cmd == "load":
            self.load_from_query(str(data.get("query", "")))
        else:
            self.status_msg = f"Unknown cmd '{cmd}'. Use set/next/keep/load."

    def _cmd_set(self, data: dict) -> None:
        """set: mode and/or seed in one rebuild."""
        if "mode" not in data and "seed" not in data:
            self.status_msg = "set: 'mode' or 'seed' field required."
            return
        if "mode" in data:
            mode = str(data["mode"]).strip()
            if mode not in MODES:
                self.status_msg = f"Unknown mode '{mode}'. Use 8 or 9."
                return
            self.mode = mode
        if "seed" in data:
            self.set_seed(data["seed"])
        else:
            self.status_msg = ""
            self._rebuild(self.seed)

    def _cmd_keep(self, data: dict) -> None:
        keep_rack = bool(data.get("rack", False))
        keep_cue  = bool(data.get("cue", False))
        if keep_rack and keep_cue:
            self.status_msg = ""
            self._rebuild(random_seed(), keep_rack=True, keep_cue=True)
        elif keep_rack:
            self.reroll_cue()
        elif keep_cue:
            self.reroll_rack()
        else:
            self.next_scenario()

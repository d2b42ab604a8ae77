"""
Interactive signature session.

Holds the current name and options, rebuilds the signature on every change,
and drives the key-flash indicator as a two-state machine with one owned timer.
"""

import logging
import threading
from enum import Enum
from typing import Callable, FrozenSet, Optional

from .config import FLASH_SECONDS, SignatureConfig
from .keyboard import active_keys, current_key
from .signature import Signature, compute_signature

logger = logging.getLogger(__name__)


class FlashState(Enum):
    IDLE = "idle"
    FLASHING = "flashing"


class SignatureSession:
    """
    One user's editing session.

    ``timer_factory`` is called as ``timer_factory(seconds, callback)`` and
    must return an object with ``start()`` and ``cancel()``, like
    ``threading.Timer``. ``caps_source`` reports the physical CapsLock state;
    it only affects key labels and clicked characters, never the signature.
    """

    def __init__(self, config: Optional[SignatureConfig] = None,
                 timer_factory: Callable = threading.Timer,
                 caps_source: Optional[Callable[[], bool]] = None,
                 flash_seconds: float = FLASH_SECONDS):
        self.config = config or SignatureConfig()
        self.flash_state = FlashState.IDLE
        self._timer_factory = timer_factory
        self._caps_source = caps_source or (lambda: False)
        self._flash_seconds = flash_seconds
        self._timer = None
        self._lock = threading.Lock()
        self._name = ""
        self.signature = compute_signature("", self.config)

    @property
    def name(self) -> str:
        return self._name

    def set_name(self, name: str) -> Signature:
        with self._lock:
            self._name = name
            self._rebuild()
            self._cancel_timer()
            if name:
                self.flash_state = FlashState.FLASHING
                timer = None

                def expire():
                    self._end_flash(timer)

                timer = self._timer_factory(self._flash_seconds, expire)
                self._timer = timer
                timer.start()
                logger.debug("flashing keys for %d segment(s)", len(self.signature.segments))
            else:
                self.flash_state = FlashState.IDLE
            return self.signature

    def append_key(self, label: str) -> Signature:
        """Append the character produced by clicking an on-screen key."""
        return self.set_name(self._name + self.click_char(label))

    def set_curve_mode(self, curve_mode) -> Signature:
        self.config = self.config.with_curve_mode(curve_mode)
        return self._rebuild()

    def set_dash_mode(self, dash_mode) -> Signature:
        self.config = self.config.with_dash_mode(dash_mode)
        return self._rebuild()

    def set_layout(self, layout_id: str) -> Signature:
        self.config = self.config.with_layout(layout_id)
        return self._rebuild()

    @property
    def caps_on(self) -> bool:
        return bool(self._caps_source())

    def key_label(self, label: str) -> str:
        """Label shown on a key, following the CapsLock state for letters."""
        if "A" <= label <= "Z" and len(label) == 1:
            return label if self.caps_on else label.lower()
        return label

    click_char = key_label

    @property
    def active_keys(self) -> FrozenSet[str]:
        return active_keys(self._name, self.config.layout_id)

    @property
    def current_key(self) -> Optional[str]:
        return current_key(self._name, self.config.layout_id)

    def close(self):
        with self._lock:
            self._cancel_timer()
            self.flash_state = FlashState.IDLE

    def _rebuild(self) -> Signature:
        self.signature = compute_signature(self._name, self.config)
        return self.signature

    def _end_flash(self, timer):
        # cancel() cannot stop a callback that has already started
        with self._lock:
            if self._timer is not timer:
                return
            self.flash_state = FlashState.IDLE
            self._timer = None

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

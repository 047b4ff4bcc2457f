"""Smoke tests for the pygame UI.

These tests verify that the application's main loop can initialise and
execute a handful of frames without crashing when the SDL dummy video
driver is used.  They do not check rendering correctness.
"""

from __future__ import annotations

import os

# Use the dummy drivers before importing pygame or the application
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

from mental_math_trainer.storage import MemoryStore


def test_app_runs_headless() -> None:
    """Ensure the application can start and run a few frames headlessly."""
    from mental_math_trainer.app import run

    store = MemoryStore()
    exit_code = run(max_frames=3, store=store)
    assert exit_code == 0
    assert store.writes == 0


def test_app_scripted_start_and_answer() -> None:
    import pygame

    from mental_math_trainer.app import run

    def inject(frame: int) -> None:
        if frame == 1:
            pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_RETURN, "unicode": "\r"}))
        elif frame == 2:
            pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_a, "unicode": "a"}))
            pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_7, "unicode": "7"}))
        elif frame == 3:
            pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_RETURN, "unicode": "\r"}))
        elif frame == 4:
            pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": pygame.K_ESCAPE, "unicode": ""}))

    store = MemoryStore()
    assert run(max_frames=12, event_injector=inject, store=store, seed=3) == 0
    assert store.writes == 0

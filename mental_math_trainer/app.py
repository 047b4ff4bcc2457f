"""Pygame UI shell for the Mental Math Trainer.

The screen only renders ``RoundSnapshot`` values and forwards key presses to
the ``RoundController``; timing, scoring, problem generation and level
progression all live in the core modules.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import Protocol

import pygame

from .clock import Clock, RealClock
from .round_controller import Feedback, RoundController, RoundPhase, RoundSnapshot, build_round_controller
from .storage import JsonFileStore, KeyValueStore

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "MENTAL_MATH_LOG_LEVEL"

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

BG = (245, 246, 252)
PANEL_BG = (255, 255, 255)
PANEL_BORDER = (214, 218, 236)
TEXT_MAIN = (31, 41, 55)
TEXT_MUTED = (107, 114, 128)
ACCENT = (124, 58, 237)
TIMER = (234, 88, 12)
GOOD = (22, 163, 74)
BAD = (220, 38, 38)
NEUTRAL = (161, 98, 7)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


class App:
    def __init__(self, surface: pygame.Surface) -> None:
        self._surface = surface
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class DrillScreen:
    """Level info -> timed round -> results, repeated.

    Esc quits from the level info and results views; during a round it is
    ignored so a round cannot be abandoned by accident.
    """

    def __init__(self, app: App, *, controller: RoundController, clock: Clock) -> None:
        self._app = app
        self._controller = controller
        self._clock = clock
        self._input = ""
        self._feedback_shown_at_s: float | None = None

        self._title_font = pygame.font.Font(None, 40)
        self._small_font = pygame.font.Font(None, 26)
        self._prompt_font = pygame.font.Font(None, 96)
        self._input_font = pygame.font.Font(None, 56)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type != pygame.KEYDOWN:
            return

        phase = self._controller.phase
        if phase is not RoundPhase.ACTIVE:
            if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
                self._input = ""
                self._feedback_shown_at_s = None
                self._controller.start_round()
            elif event.key == pygame.K_ESCAPE:
                self._app.quit()
            return

        if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            self._submit()
        elif event.key in (pygame.K_BACKSPACE, pygame.K_DELETE):
            self._input = self._input[:-1]
        elif event.unicode and (event.unicode.isdigit() or event.unicode in "-."):
            if len(self._input) < 12:
                self._input += event.unicode

    def _submit(self) -> None:
        feedback = self._controller.submit_answer(self._input)
        self._input = ""
        if feedback is not None:
            self._feedback_shown_at_s = self._clock.now()

    def update(self) -> None:
        self._controller.update()
        feedback = self._controller.feedback
        if feedback is None or self._feedback_shown_at_s is None:
            return
        if self._clock.now() - self._feedback_shown_at_s >= feedback.clear_after_s:
            self._controller.clear_feedback()
            self._feedback_shown_at_s = None

    def render(self, surface: pygame.Surface) -> None:
        self.update()
        snap = self._controller.snapshot()

        w, h = surface.get_size()
        surface.fill(BG)
        margin = max(12, min(32, w // 30))
        panel = pygame.Rect(margin, margin, w - margin * 2, h - margin * 2)
        pygame.draw.rect(surface, PANEL_BG, panel)
        pygame.draw.rect(surface, PANEL_BORDER, panel, 1)

        self._render_header(surface, panel, snap)
        body = pygame.Rect(panel.x + 24, panel.y + 70, panel.w - 48, panel.h - 94)
        if snap.phase is RoundPhase.ACTIVE:
            self._render_active(surface, body, snap)
        elif snap.phase is RoundPhase.COMPLETE:
            self._render_complete(surface, body, snap)
        else:
            self._render_level_info(surface, body, snap)

        if snap.feedback is not None and snap.feedback.message:
            self._render_feedback(surface, panel, snap.feedback)

    def _render_header(self, surface: pygame.Surface, panel: pygame.Rect, snap: RoundSnapshot) -> None:
        title = self._title_font.render("Mental Math Trainer", True, ACCENT)
        surface.blit(title, (panel.x + 20, panel.y + 18))

        level = self._small_font.render(f"Level {snap.level}", True, TEXT_MUTED)
        right = panel.right - 20
        if snap.phase is RoundPhase.ACTIVE:
            timer = self._small_font.render(f"{snap.time_left_s}s", True, TIMER)
            surface.blit(timer, timer.get_rect(topright=(right, panel.y + 26)))
            right -= timer.get_width() + 20
        surface.blit(level, level.get_rect(topright=(right, panel.y + 26)))
        pygame.draw.line(surface, PANEL_BORDER, (panel.x, panel.y + 60), (panel.right, panel.y + 60), 1)

    def _render_level_info(self, surface: pygame.Surface, body: pygame.Rect, snap: RoundSnapshot) -> None:
        lines = [
            f"Level {snap.level}",
            "",
            "Mixed operations (+ - × ÷)",
            f"Answers will be between 0 and {snap.target_range}",
            f"Answer {snap.requirement.min_correct}+ questions in 60 seconds",
            f"No more than {snap.requirement.max_mistakes} mistakes",
            "",
            "Press Enter to start. Esc to quit.",
        ]
        self._blit_lines(surface, body, lines)

    def _render_active(self, surface: pygame.Surface, body: pygame.Rect, snap: RoundSnapshot) -> None:
        correct = self._small_font.render(f"Correct: {snap.correct_answers}", True, GOOD)
        mistakes = self._small_font.render(f"Mistakes: {snap.mistakes}", True, BAD)
        surface.blit(correct, (body.x, body.y))
        surface.blit(mistakes, mistakes.get_rect(topright=(body.right, body.y)))

        prompt = self._prompt_font.render(snap.prompt, True, TEXT_MAIN)
        surface.blit(prompt, prompt.get_rect(center=(body.centerx, body.y + int(body.h * 0.35))))

        box = pygame.Rect(0, 0, max(220, min(380, int(body.w * 0.45))), 60)
        box.center = (body.centerx, body.y + int(body.h * 0.68))
        pygame.draw.rect(surface, BG, box)
        pygame.draw.rect(surface, PANEL_BORDER, box, 2)
        caret = "|" if (pygame.time.get_ticks() // 500) % 2 == 0 else ""
        entry = self._input_font.render(self._input + caret, True, TEXT_MAIN)
        surface.blit(entry, (box.x + 12, box.y + max(2, (box.h - entry.get_height()) // 2)))

        hint = self._small_font.render("Type answer then Enter", True, TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midtop=(body.centerx, box.bottom + 10)))

    def _render_complete(self, surface: pygame.Surface, body: pygame.Rect, snap: RoundSnapshot) -> None:
        result = snap.last_result
        if result is None:
            return
        req = result.requirement
        enough = result.correct >= req.min_correct
        careful = result.mistakes <= req.max_mistakes

        heading = "Level Complete!" if result.passed else "Level Failed"
        head = self._title_font.render(heading, True, GOOD if result.passed else BAD)
        surface.blit(head, head.get_rect(midtop=(body.centerx, body.y + 10)))

        y = body.y + 80
        for label, value, ok in (
            ("Questions Answered", result.correct, enough),
            ("Mistakes", result.mistakes, careful),
        ):
            text = self._small_font.render(f"{label}: {value}", True, TEXT_MAIN)
            mark = self._small_font.render("OK" if ok else "X", True, GOOD if ok else BAD)
            surface.blit(text, text.get_rect(midtop=(body.centerx, y)))
            surface.blit(mark, (body.centerx + text.get_width() // 2 + 12, y))
            y += 40

        action = "Start Next Level" if result.passed else "Retry Level"
        hint = self._small_font.render(f"Enter: {action}   Esc: Quit", True, ACCENT)
        surface.blit(hint, hint.get_rect(midtop=(body.centerx, y + 30)))

    def _render_feedback(self, surface: pygame.Surface, panel: pygame.Rect, feedback: Feedback) -> None:
        if feedback.is_correct is True:
            color = GOOD
        elif feedback.is_correct is False:
            color = BAD
        else:
            color = NEUTRAL
        text = self._small_font.render(feedback.message, True, color)
        surface.blit(text, text.get_rect(midbottom=(panel.centerx, panel.bottom - 16)))

    def _blit_lines(self, surface: pygame.Surface, body: pygame.Rect, lines: list[str]) -> None:
        y = body.y
        for line in lines:
            if line:
                text = self._small_font.render(line, True, TEXT_MAIN)
                surface.blit(text, (body.x, y))
            y += 34


def _configure_logging() -> None:
    name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    store: KeyValueStore | None = None,
    seed: int | None = None,
) -> int:
    _configure_logging()
    pygame.init()

    pygame.display.set_caption("Mental Math Trainer")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    frame_clock = pygame.time.Clock()

    if store is None:
        store = JsonFileStore(JsonFileStore.default_path())
    real_clock = RealClock()
    controller = build_round_controller(clock=real_clock, store=store, seed=seed)
    logger.info("Loaded level %d", controller.level)

    app = App(surface=surface)
    app.push(DrillScreen(app, controller=controller, clock=real_clock))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            frame_clock.tick(TARGET_FPS)
    finally:
        pygame.quit()

    return 0

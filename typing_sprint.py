#!/usr/bin/env python3
'''
Typing Sprint - Terminal Typing Speed Test
==========================================

Features
--------
1) Type a sequence of random words with **per-keystroke feedback** (green = correct, red = wrong).
2) Two test modes: a fixed number of words, or a fixed duration.
3) Reports net WPM, raw WPM and accuracy when the test ends.
4) Optional punctuation drills and reproducible word sequences (`--seed`).
5) Keystroke engine is independent of curses, so it can be driven and tested without a terminal.

Quick Start
-----------
- Run: `python3 typing_sprint.py` (25 words) or `python3 typing_sprint.py --duration 30`

Command-Line Options
--------------------
- `--words N`, `-w N`          : Number of words to type (default: 25).
- `--duration SECONDS`, `-d S` : Time-box the test instead. Cannot be combined with --words.
- `--words-file PATH`          : JSON word list: {"name": "...", "words": ["...", ...]}.
- `--punctuate`, `-p`          : Add capitals and punctuation to the words.
- `--seed SEED`, `-s SEED`     : Seed the word generator (the seed is printed after every test).
- `--plot PREFIX`              : Save PREFIX_wpm.png (raw WPM per second + errors) after the test.
- `--log-file PATH`, `-v`      : Write a log file (`-v` for debug records).

Controls (during a test)
------------------------
- The timer starts with the first keystroke.
- Space moves to the next word once every letter of the current word is typed.
- Backspace corrects the current word; Ctrl-W clears it. Finished words are locked.
- Press ESC (or Ctrl-C) to quit early; a partial result is still reported.

Design Notes
------------
- WPM: (chars/5)/minutes. Net counts correct chars only, raw counts correct + incorrect.
- Accuracy: correct / (correct + incorrect + extra) keystrokes. Backspace does not undo a keystroke.
- Modules: WordSupplier, KeystrokeTracker, SessionController, compute (metrics), TerminalScreen.
'''

from __future__ import annotations
import argparse
import collections
import curses
import json
import logging
import math
import random
import sys
import textwrap
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

log = logging.getLogger(__name__)

DEFAULT_WORD_COUNT = 25
# Words kept ready ahead of the cursor in duration mode.
LOOKAHEAD_WORDS = 50
FAST_TYPIST_WPM = 250
EXTRA_DISPLAY_LIMIT = 10
# Seconds per timeline bucket.
TIMELINE_STEP = 1.0
POLL_MS = 16

# ------------------------------
# Utility helpers
# ------------------------------

def human_duration(seconds: float) -> str:
    seconds = int(seconds)
    m, s = divmod(seconds, 60)
    return f"{m}m{s:02d}s" if m else f"{s}s"

# ------------------------------
# Errors
# ------------------------------

class TypingSprintError(Exception):
    """Base class for setup failures. Carries the process exit code."""
    exit_code = 1


class ConfigurationError(TypingSprintError):
    exit_code = 1


class InvalidArgument(TypingSprintError):
    exit_code = 2


class ConflictingArguments(TypingSprintError):
    exit_code = 2

# ------------------------------
# Session configuration
# ------------------------------

@dataclass(frozen=True)
class WordCount:
    n: int

    def __post_init__(self):
        if self.n <= 0:
            raise ConfigurationError(f"word count must be positive, got {self.n}")

    def describe(self) -> str:
        return f"{self.n} words"


@dataclass(frozen=True)
class Duration:
    seconds: int

    def __post_init__(self):
        if self.seconds <= 0:
            raise ConfigurationError(f"duration must be positive, got {self.seconds}")

    def describe(self) -> str:
        return f"{self.seconds}s"


Mode = Union[WordCount, Duration]


@dataclass(frozen=True)
class SessionConfig:
    mode: Mode = field(default_factory=lambda: WordCount(DEFAULT_WORD_COUNT))
    seed: Optional[int] = None
    punctuate: bool = False

# ------------------------------
# Word lists
# ------------------------------

COMMON_WORDS = """
the of and to in is you that it he was for on are as with his they i at be this
have from or one had by word but not what all were we when your can said there
use an each which she do how their if will up other about out many then them
these so some her would make like him into time has look two more write go see
number no way could people my than first water been call who oil its now find
long down day did get come made may part over new sound take only little work
know place year live me back give most very after thing our just name good
sentence man think say great where help through much before line right too mean
old any same tell boy follow came want show also around form three small set put
end does another well large must big even such because turn here why ask went
men read need land different home us move try kind hand picture again change off
play spell air away animal house point page letter mother answer found study
still learn should world high every near add food between own below country plant
last school father keep tree never start city earth eye light thought head under
story saw left few while along might close something seem next hard open example
begin life always those both paper together got group often run important until
children side feet car mile night walk white sea began grow took river four carry
state once book hear stop without second later miss idea enough eat face watch far
""".strip().split()


@dataclass
class WordList:
    name: str
    words: List[str]


DEFAULT_WORD_LIST = WordList(name="english", words=COMMON_WORDS)


def load_word_list(path: str) -> WordList:
    """Read a JSON word list of the form {"name": "...", "words": [...]}."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise ConfigurationError(f"cannot read word file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"word file {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict) or not isinstance(data.get("words"), list):
        raise ConfigurationError(f"word file {path} must contain a \"words\" list")
    name = data.get("name") or Path(path).stem
    return WordList(name=str(name), words=[str(w) for w in data["words"]])

# ------------------------------
# Word Supplier
# ------------------------------

# (mark, weight)
PUNCTUATION = [
    (".", 3), (",", 2), ("-", 2), ("()", 2), ("!", 2),
    (";", 1), (":", 2), ('""', 2), ("''", 2),
]
PUNCTUATION_JUMP = (2, 4)


class WordSupplier:
    def __init__(self, words: Iterable[str], rng: random.Random | None = None, punctuate: bool = False):
        self.words = [w.strip() for w in words if w and w.strip()]
        if not self.words:
            raise ConfigurationError("dictionary is empty")
        bad = [w for w in self.words if any(c.isspace() for c in w)]
        if bad:
            raise ConfigurationError(f"dictionary words must not contain whitespace: {bad[0]!r}")
        self.rng = rng or random.Random()
        self.punctuate = punctuate
        self._drawn = 0
        self._next_mark = self._jump() if punctuate else None
        self._capitalize_next = True

    @classmethod
    def from_config(cls, word_list: WordList, config: SessionConfig) -> "WordSupplier":
        return cls(word_list.words, rng=random.Random(config.seed), punctuate=config.punctuate)

    @staticmethod
    def initial_size(mode: Mode) -> int:
        if isinstance(mode, WordCount):
            return mode.n
        return max(LOOKAHEAD_WORDS, math.ceil(mode.seconds * FAST_TYPIST_WPM / 60))

    def generate(self, mode: Mode) -> "TargetText":
        words = self.draw(self.initial_size(mode))
        if isinstance(mode, WordCount):
            # Punctuation may insert a standalone "-"; the count stays exact.
            words = words[:mode.n]
        return TargetText(words)

    def extend(self, target: "TargetText", count: int = LOOKAHEAD_WORDS):
        target.extend(self.draw(count))

    def draw(self, count: int) -> List[str]:
        out: List[str] = []
        while len(out) < count:
            word = self.rng.choice(self.words)
            if self.punctuate:
                out.extend(self._punctuated(word))
            else:
                out.append(word)
            self._drawn += 1
        return out

    def _jump(self) -> int:
        return self.rng.randint(*PUNCTUATION_JUMP)

    def _punctuated(self, word: str) -> List[str]:
        if self._capitalize_next:
            self._capitalize_next = False
            word = word[:1].upper() + word[1:]
        if self._drawn != self._next_mark:
            return [word]

        self._next_mark += self._jump()
        marks = [m for m, _ in PUNCTUATION]
        weights = [w for _, w in PUNCTUATION]
        mark = self.rng.choices(marks, weights=weights, k=1)[0]
        if mark in (".", "!"):
            self._capitalize_next = True
            return [word + mark]
        if mark == "-":
            return [mark, word]
        if len(mark) == 2:
            return [mark[0] + word + mark[1]]
        return [word + mark]

# ------------------------------
# Target text
# ------------------------------

class CharState(Enum):
    UNTYPED = "untyped"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    EXTRA = "extra"


@dataclass
class CharSlot:
    expected: str
    state: CharState = CharState.UNTYPED


class TargetText:
    """Words joined by single spaces; one CharSlot per character, separators included.

    Only ever appended to, so text the user has typed never changes.
    """

    def __init__(self, words: Iterable[str] = ()):
        self.words: List[str] = []
        self.starts: List[int] = []
        self.slots: List[CharSlot] = []
        self.extend(words)

    def extend(self, words: Iterable[str]):
        for word in words:
            if self.words:
                self.slots.append(CharSlot(" "))
            self.starts.append(len(self.slots))
            self.words.append(word)
            self.slots.extend(CharSlot(c) for c in word)

    def __len__(self) -> int:
        return len(self.slots)

    @property
    def word_count(self) -> int:
        return len(self.words)

    @property
    def text(self) -> str:
        return " ".join(self.words)

    def start(self, index: int) -> int:
        return self.starts[index]

    def end(self, index: int) -> int:
        return self.starts[index] + len(self.words[index])

# ------------------------------
# Events
# ------------------------------

@dataclass(frozen=True)
class Char:
    """A printable keystroke (space included)."""
    char: str
    timestamp: Optional[float] = None


KeystrokeEvent = Char


@dataclass(frozen=True)
class Backspace:
    timestamp: Optional[float] = None


@dataclass(frozen=True)
class DeleteWord:
    timestamp: Optional[float] = None


@dataclass(frozen=True)
class Quit:
    timestamp: Optional[float] = None


@dataclass(frozen=True)
class Tick:
    timestamp: Optional[float] = None


Event = Union[Char, Backspace, DeleteWord, Quit, Tick]

# ------------------------------
# Keystroke Tracker
# ------------------------------

@dataclass(frozen=True)
class TrackerUpdate:
    cursor_moved: bool = False
    word_completed: bool = False
    completed: bool = False
    # State given to the keystroke, for Char events that were recorded.
    marked: Optional[CharState] = None


NO_CHANGE = TrackerUpdate()


class KeystrokeTracker:
    def __init__(self, target: TargetText, finite: bool = True):
        self.target = target
        self.finite = finite
        self.cursor = 0
        self.word_index = 0
        self.words_completed = 0
        self.correct_chars = 0
        self.incorrect_chars = 0
        self.extra_chars = 0
        self.extras: Dict[int, List[str]] = collections.defaultdict(list)
        self.completed = False

    @property
    def word_start(self) -> int:
        return self.target.start(self.word_index)

    @property
    def word_end(self) -> int:
        return self.target.end(self.word_index)

    @property
    def words_remaining(self) -> int:
        return self.target.word_count - self.word_index

    def apply(self, event: Event) -> TrackerUpdate:
        if self.completed:
            return NO_CHANGE
        if isinstance(event, Char):
            if event.char == " ":
                return self._space()
            return self._char(event.char)
        if isinstance(event, Backspace):
            return self._backspace()
        if isinstance(event, DeleteWord):
            return self._delete_word()
        return NO_CHANGE

    def _char(self, c: str) -> TrackerUpdate:
        if self.cursor >= self.word_end:
            self.extras[self.word_index].append(c)
            self.extra_chars += 1
            return TrackerUpdate(marked=CharState.EXTRA)

        slot = self.target.slots[self.cursor]
        if slot.expected == c:
            slot.state = CharState.CORRECT
            self.correct_chars += 1
        else:
            slot.state = CharState.INCORRECT
            self.incorrect_chars += 1
        self.cursor += 1

        if self.finite and self.cursor == len(self.target):
            self.words_completed += 1
            self.completed = True
            return TrackerUpdate(cursor_moved=True, word_completed=True, completed=True, marked=slot.state)
        return TrackerUpdate(cursor_moved=True, marked=slot.state)

    def _space(self) -> TrackerUpdate:
        if self.cursor < self.word_end or self.word_index + 1 >= self.target.word_count:
            return NO_CHANGE
        self.target.slots[self.word_end].state = CharState.CORRECT
        self.word_index += 1
        self.cursor = self.word_start
        self.words_completed += 1
        return TrackerUpdate(cursor_moved=True, word_completed=True)

    def _backspace(self) -> TrackerUpdate:
        extras = self.extras.get(self.word_index)
        if extras:
            extras.pop()
            return NO_CHANGE
        if self.cursor <= self.word_start:
            return NO_CHANGE
        self.cursor -= 1
        self.target.slots[self.cursor].state = CharState.UNTYPED
        return TrackerUpdate(cursor_moved=True)

    def _delete_word(self) -> TrackerUpdate:
        self.extras.pop(self.word_index, None)
        if self.cursor <= self.word_start:
            return NO_CHANGE
        for slot in self.target.slots[self.word_start:self.cursor]:
            slot.state = CharState.UNTYPED
        self.cursor = self.word_start
        return TrackerUpdate(cursor_moved=True)

# ------------------------------
# Metrics
# ------------------------------

class FinishReason(Enum):
    COMPLETED = "completed"
    TIMEOUT = "timeout"
    QUIT = "quit"


@dataclass(frozen=True)
class TimelinePoint:
    time: float
    chars: int
    errors: int


@dataclass(frozen=True)
class SessionResult:
    elapsed: float
    correct_chars: int
    incorrect_chars: int
    extra_chars: int
    words_completed: int
    accuracy: float
    wpm: float
    raw_wpm: float
    reason: FinishReason = FinishReason.COMPLETED
    timeline: Tuple[TimelinePoint, ...] = ()

    @property
    def aborted(self) -> bool:
        return self.reason is FinishReason.QUIT

    @property
    def chars_typed(self) -> int:
        return self.correct_chars + self.incorrect_chars + self.extra_chars


def normalize_wpm(chars: float, seconds: float) -> float:
    if seconds <= 0:
        return 0.0
    return (chars / 5.0) / (seconds / 60.0)


def accuracy_percent(correct: int, incorrect: int, extra: int) -> float:
    total = correct + incorrect + extra
    if total == 0:
        return 0.0
    return correct / total * 100.0


def compute(correct_chars: int, incorrect_chars: int, extra_chars: int, words_completed: int,
            elapsed: float, reason: FinishReason = FinishReason.COMPLETED,
            timeline: Iterable[TimelinePoint] = ()) -> SessionResult:
    return SessionResult(
        elapsed=elapsed,
        correct_chars=correct_chars,
        incorrect_chars=incorrect_chars,
        extra_chars=extra_chars,
        words_completed=words_completed,
        accuracy=accuracy_percent(correct_chars, incorrect_chars, extra_chars),
        wpm=normalize_wpm(correct_chars, elapsed),
        raw_wpm=normalize_wpm(correct_chars + incorrect_chars, elapsed),
        reason=reason,
        timeline=tuple(timeline),
    )

# ------------------------------
# Session Controller
# ------------------------------

class SessionState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    FINISHED = "finished"


@dataclass(frozen=True)
class WordView:
    index: int
    expected: str
    states: Tuple[CharState, ...]
    extras: str


@dataclass(frozen=True)
class Frame:
    """Everything the renderer needs for one redraw."""
    state: SessionState
    words: Tuple[WordView, ...]
    word_index: int
    cursor_offset: int
    elapsed: float
    remaining: Optional[float]
    wpm: float
    accuracy: float
    words_completed: int
    words_total: Optional[int]


class SessionController:
    FRAME_WORDS_BEHIND = 30
    FRAME_WORDS_AHEAD = 60

    def __init__(self, config: SessionConfig, supplier: WordSupplier,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config
        self.supplier = supplier
        self.clock = clock
        self.target = supplier.generate(config.mode)
        self.tracker = KeystrokeTracker(self.target, finite=isinstance(config.mode, WordCount))
        self.state = SessionState.NOT_STARTED
        self.started_at: Optional[float] = None
        self.result: Optional[SessionResult] = None
        self._buckets: Dict[int, List[int]] = collections.defaultdict(lambda: [0, 0])

    @property
    def duration(self) -> Optional[int]:
        if isinstance(self.config.mode, Duration):
            return self.config.mode.seconds
        return None

    def elapsed(self, now: Optional[float] = None) -> float:
        if self.started_at is None:
            return 0.0
        if self.result is not None:
            return self.result.elapsed
        now = self.clock() if now is None else now
        return max(0.0, now - self.started_at)

    def remaining(self, now: Optional[float] = None) -> Optional[float]:
        if self.duration is None:
            return None
        return max(0.0, self.duration - self.elapsed(now))

    def apply(self, event: Event) -> Optional[TrackerUpdate]:
        if self.state is SessionState.FINISHED:
            log.debug("Discarding %r, session already finished", event)
            return None
        now = self.clock() if event.timestamp is None else event.timestamp

        # Past the deadline the session is already over, whatever the event.
        if self._timed_out(now):
            self._finish(FinishReason.TIMEOUT, now)
            return None
        if isinstance(event, Quit):
            self._finish(FinishReason.QUIT, now)
            return None
        if self.state is SessionState.NOT_STARTED:
            if isinstance(event, Tick):
                return None
            self.state = SessionState.RUNNING
            self.started_at = now
            log.info("Session started (%s)", self.config.mode.describe())

        if isinstance(event, Tick):
            return None

        update = self.tracker.apply(event)
        if update.marked is not None:
            bucket = self._buckets[int((now - self.started_at) // TIMELINE_STEP)]
            bucket[0] += 1
            if update.marked is not CharState.CORRECT:
                bucket[1] += 1
        if update.word_completed and not self.tracker.finite:
            self._ensure_lookahead()
        if update.completed:
            self._finish(FinishReason.COMPLETED, now)
        return update

    def run(self, events: Iterable[Event]) -> Optional[SessionResult]:
        for event in events:
            self.apply(event)
            if self.state is SessionState.FINISHED:
                break
        return self.result

    def _timed_out(self, now: float) -> bool:
        return (self.duration is not None and self.started_at is not None
                and now - self.started_at >= self.duration)

    def _ensure_lookahead(self):
        if self.tracker.words_remaining < LOOKAHEAD_WORDS:
            self.supplier.extend(self.target, LOOKAHEAD_WORDS)
            log.debug("Target extended to %d words", self.target.word_count)

    def _timeline(self) -> List[TimelinePoint]:
        return [TimelinePoint(time=(k + 1) * TIMELINE_STEP, chars=v[0], errors=v[1])
                for k, v in sorted(self._buckets.items())]

    def _finish(self, reason: FinishReason, now: float):
        if self.started_at is None:
            elapsed = 0.0
        elif reason is FinishReason.TIMEOUT:
            elapsed = float(self.duration)
        else:
            elapsed = max(0.0, now - self.started_at)
        t = self.tracker
        self.result = compute(t.correct_chars, t.incorrect_chars, t.extra_chars, t.words_completed,
                              elapsed, reason=reason, timeline=self._timeline())
        self.state = SessionState.FINISHED
        log.info("Session finished: %s after %.1fs, correct=%d incorrect=%d extra=%d words=%d",
                 reason.value, elapsed, t.correct_chars, t.incorrect_chars, t.extra_chars,
                 t.words_completed)

    def frame(self, now: Optional[float] = None) -> Frame:
        t = self.tracker
        first = max(0, t.word_index - self.FRAME_WORDS_BEHIND)
        last = min(self.target.word_count, t.word_index + self.FRAME_WORDS_AHEAD)
        views = []
        for i in range(first, last):
            start, end = self.target.start(i), self.target.end(i)
            views.append(WordView(
                index=i,
                expected=self.target.words[i],
                states=tuple(s.state for s in self.target.slots[start:end]),
                extras="".join(t.extras.get(i, ())),
            ))
        elapsed = self.elapsed(now)
        return Frame(
            state=self.state,
            words=tuple(views),
            word_index=t.word_index,
            cursor_offset=t.cursor - t.word_start + len(t.extras.get(t.word_index, ())),
            elapsed=elapsed,
            remaining=self.remaining(now),
            wpm=normalize_wpm(t.correct_chars, elapsed),
            accuracy=accuracy_percent(t.correct_chars, t.incorrect_chars, t.extra_chars),
            words_completed=t.words_completed,
            words_total=self.config.mode.n if isinstance(self.config.mode, WordCount) else None,
        )

# ------------------------------
# Terminal screen (curses)
# ------------------------------

KEY_ESC = 27
KEY_CTRL_C = 3
KEY_CTRL_W = 23


def decode_key(ch: int, now: Optional[float] = None) -> Optional[Event]:
    """Turn a curses key code into an engine event, or None for keys the test ignores."""
    if ch == -1:
        return Tick(now)
    if ch in (KEY_ESC, KEY_CTRL_C):
        return Quit(now)
    if ch in (curses.KEY_BACKSPACE, 127, 8):
        return Backspace(now)
    if ch == KEY_CTRL_W:
        return DeleteWord(now)
    if 32 <= ch <= 126:
        return Char(chr(ch), now)
    return None


def layout_rows(words: Iterable[WordView], width: int) -> List[List[WordView]]:
    rows: List[List[WordView]] = [[]]
    x = 0
    for w in words:
        size = len(w.expected) + min(len(w.extras), EXTRA_DISPLAY_LIMIT)
        if rows[-1] and x + size > width:
            rows.append([])
            x = 0
        rows[-1].append(w)
        x += size + 1
    return rows


class TerminalScreen:
    COLOR_OK = 1
    COLOR_ERR = 2
    COLOR_DIM = 3
    COLOR_INFO = 4
    TEXT_ROWS = 3
    MARGIN = 4

    def __init__(self, stdscr):
        self.stdscr = stdscr

    def setup(self):
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(self.COLOR_OK, curses.COLOR_GREEN, -1)
        curses.init_pair(self.COLOR_ERR, curses.COLOR_RED, -1)
        curses.init_pair(self.COLOR_DIM, curses.COLOR_CYAN, -1)
        curses.init_pair(self.COLOR_INFO, curses.COLOR_YELLOW, -1)
        # Ctrl-C arrives as a key, not as SIGINT.
        curses.raw()
        self.stdscr.timeout(POLL_MS)
        curses.curs_set(0)

    def read_event(self, clock: Callable[[], float]) -> Optional[Event]:
        try:
            ch = self.stdscr.getch()
        except curses.error:
            ch = -1
        # Stamp after getch returns; it may have waited up to POLL_MS.
        return decode_key(ch, clock())

    def _addstr(self, y: int, x: int, text: str, attr: int = 0):
        maxy, maxx = self.stdscr.getmaxyx()
        if y >= maxy or x >= maxx - 1:
            return
        try:
            self.stdscr.addstr(y, x, text[:maxx - 1 - x], attr)
        except curses.error:
            pass

    def draw_header(self, frame: Frame):
        if frame.state is SessionState.NOT_STARTED:
            info = "Start typing to begin."
        elif frame.words_total is not None:
            info = f"{frame.words_completed}/{frame.words_total}"
        else:
            info = f"Left: {human_duration(math.ceil(frame.remaining or 0))}"
        info += f"  |  WPM: {frame.wpm:.0f}  Acc: {frame.accuracy:5.1f}%  Time: {human_duration(frame.elapsed)}"
        self._addstr(0, 0, info, curses.color_pair(self.COLOR_INFO))
        _, maxx = self.stdscr.getmaxyx()
        self.stdscr.hline(1, 0, curses.ACS_HLINE, maxx)

    def draw_words(self, frame: Frame):
        maxy, maxx = self.stdscr.getmaxyx()
        width = max(10, maxx - 2 * self.MARGIN)
        rows = layout_rows(frame.words, width)
        current = next((r for r, row in enumerate(rows) if any(w.index == frame.word_index for w in row)), 0)
        # Keep one row of already typed words above the current one.
        first = max(0, current - 1)
        ok = curses.color_pair(self.COLOR_OK)
        err = curses.color_pair(self.COLOR_ERR)
        dim = curses.color_pair(self.COLOR_DIM)

        for r, row in enumerate(rows[first:first + self.TEXT_ROWS]):
            y = 3 + r
            x = self.MARGIN
            cursor_x = self._cursor_x(row, frame)
            for w in row:
                for ch, state in zip(w.expected, w.states):
                    attr = ok if state is CharState.CORRECT else err if state is CharState.INCORRECT else dim
                    if x - self.MARGIN == cursor_x:
                        attr |= curses.A_REVERSE
                    self._addstr(y, x, ch, attr)
                    x += 1
                extras = w.extras[:EXTRA_DISPLAY_LIMIT]
                self._addstr(y, x, extras, err | curses.A_UNDERLINE)
                x += len(extras)
                if w.index == frame.word_index and frame.cursor_offset >= len(w.expected):
                    self._addstr(y, x, " ", curses.A_REVERSE)
                x += 1

        self.stdscr.hline(3 + self.TEXT_ROWS + 1, 0, curses.ACS_HLINE, maxx)
        self._addstr(3 + self.TEXT_ROWS + 2, 0, "Space = next word | Backspace = correct | Ctrl-W = clear word | ESC = quit")

    @staticmethod
    def _cursor_x(row: List[WordView], frame: Frame) -> int:
        x = 0
        for w in row:
            if w.index == frame.word_index:
                return x + frame.cursor_offset
            x += len(w.expected) + min(len(w.extras), EXTRA_DISPLAY_LIMIT) + 1
        return -1

    def draw(self, frame: Frame):
        self.stdscr.erase()
        self.draw_header(frame)
        self.draw_words(frame)
        self.stdscr.refresh()

    def show_summary(self, result: SessionResult):
        self.stdscr.erase()
        self.stdscr.timeout(-1)
        lines = [
            ("Results", curses.A_BOLD | curses.A_UNDERLINE),
            ("", 0),
            (f"wpm      : {result.wpm:.0f}", 0),
            (f"raw      : {result.raw_wpm:.0f}", 0),
            (f"acc      : {result.accuracy:.0f}%", 0),
            (f"time     : {human_duration(result.elapsed)}", 0),
            (f"words    : {result.words_completed}", 0),
            (f"correct  : {result.correct_chars}", 0),
            (f"incorrect: {result.incorrect_chars}", 0),
            (f"extra    : {result.extra_chars}", 0),
            ("", 0),
            ("Press any key to continue...", 0),
        ]
        _, maxx = self.stdscr.getmaxyx()
        y = 0
        for text, attr in lines:
            for wrapped in textwrap.wrap(text, width=max(1, maxx - 1)) or [""]:
                self._addstr(y, 0, wrapped, attr)
                y += 1
        self.stdscr.refresh()
        self.stdscr.getch()

# ------------------------------
# Charts
# ------------------------------

def plot_timeline(result: SessionResult, prefix: str) -> Optional[str]:
    import matplotlib.pyplot as plt
    if not result.timeline:
        print("No keystrokes to plot.")
        return None
    xs = [p.time for p in result.timeline]
    raw = [normalize_wpm(p.chars, TIMELINE_STEP) for p in result.timeline]
    err_points = [(p.time, normalize_wpm(p.errors, TIMELINE_STEP)) for p in result.timeline if p.errors]

    plt.figure()
    plt.plot(xs, raw, color="gray", label="Raw WPM")
    if err_points:
        plt.scatter([x for x, _ in err_points], [y for _, y in err_points], color="red", marker="x", label="Errors")
    plt.axhline(result.wpm, linestyle="--", color="green", label=f"Net WPM ({result.wpm:.0f})")
    plt.title("Typing speed over time")
    plt.xlabel("Time (s)"); plt.ylabel("WPM"); plt.legend()
    path = f"{prefix}_wpm.png"; plt.savefig(path, bbox_inches="tight"); plt.close()
    print(f"Saved {path}")
    return path

# ------------------------------
# Run a session (wrapping curses)
# ------------------------------

def run_session(config: SessionConfig, word_list: WordList) -> SessionResult:
    supplier = WordSupplier.from_config(word_list, config)
    controller = SessionController(config, supplier)

    def _session(stdscr):
        screen = TerminalScreen(stdscr)
        screen.setup()
        while controller.state is not SessionState.FINISHED:
            screen.draw(controller.frame())
            event = screen.read_event(controller.clock)
            if event is not None:
                controller.apply(event)
        if not controller.result.aborted:
            screen.show_summary(controller.result)

    curses.wrapper(_session)
    return controller.result

# ------------------------------
# Argparse / Main
# ------------------------------

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Terminal typing speed test")
    p.add_argument("--words", "-w", type=str, default=None, help=f"Number of words to type (default: {DEFAULT_WORD_COUNT})")
    p.add_argument("--duration", "-d", type=str, default=None, help="Test duration in seconds (instead of --words)")
    p.add_argument("--words-file", type=str, default=None, help="JSON word list with a \"words\" array")
    p.add_argument("--punctuate", "-p", action="store_true", help="Add capitals and punctuation")
    p.add_argument("--seed", "-s", type=int, default=None, help="Seed for the word generator")
    p.add_argument("--plot", type=str, default=None, help="Save a WPM chart to PREFIX_wpm.png after the test")
    p.add_argument("--log-file", type=str, default=None, help="Write log records to this file")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging (with --log-file)")
    return p.parse_args(argv)


def positive_int(flag: str, value: str) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"{flag} expects a positive integer, got {value!r}") from None
    if n <= 0:
        raise InvalidArgument(f"{flag} expects a positive integer, got {value!r}")
    return n


def build_config(args) -> SessionConfig:
    if args.words is not None and args.duration is not None:
        raise ConflictingArguments("--words and --duration cannot be used together")
    if args.duration is not None:
        mode: Mode = Duration(positive_int("--duration", args.duration))
    elif args.words is not None:
        mode = WordCount(positive_int("--words", args.words))
    else:
        mode = WordCount(DEFAULT_WORD_COUNT)
    seed = args.seed if args.seed is not None else random.randrange(2 ** 32)
    return SessionConfig(mode=mode, seed=seed, punctuate=args.punctuate)


def setup_logging(log_file: Optional[str], verbose: bool = False):
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    if log_file:
        logging.basicConfig(filename=log_file, level=logging.DEBUG if verbose else logging.INFO, format=fmt)
    else:
        # curses owns the screen; only problems go to stderr.
        logging.basicConfig(level=logging.WARNING, format=fmt)


def print_result(result: SessionResult, config: SessionConfig):
    print("\n=== Session Results ===")
    if result.aborted:
        print("Status         : quit early (partial result)")
    else:
        print(f"Status         : {result.reason.value}")
    print(f"Mode           : {config.mode.describe()}")
    print(f"Elapsed        : {human_duration(result.elapsed)}")
    print(f"WPM (net)      : {result.wpm:.1f}")
    print(f"WPM (raw)      : {result.raw_wpm:.1f}")
    print(f"Accuracy       : {result.accuracy:.1f}%")
    print(f"Chars          : correct {result.correct_chars} | incorrect {result.incorrect_chars} | extra {result.extra_chars}")
    print(f"Words completed: {result.words_completed}")
    print(f"Seed           : {config.seed}")


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)

    try:
        config = build_config(args)
        word_list = load_word_list(args.words_file) if args.words_file else DEFAULT_WORD_LIST
        # Validate the dictionary before the terminal is taken over.
        WordSupplier(word_list.words)
    except TypingSprintError as exc:
        log.debug("Setup failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code

    try:
        result = run_session(config, word_list)
    except KeyboardInterrupt:
        print("\nSession cancelled."); return 0

    print_result(result, config)
    if args.plot:
        plot_timeline(result, args.plot)
    return 0

if __name__ == "__main__":
    sys.exit(main())

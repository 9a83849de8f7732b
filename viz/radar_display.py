import pygame
import threading
import queue
from typing import Optional

import config
from scope.display import FrameOutput
from scope.models import ConflictKind, Severity
from .colors import (
    AMBER, CAUTION, ERROR, GHOST, GREY, RED, SAFE, SELECTED, TRACK, WHITE,
    lerp_rgb,
)


ALERT_PHRASE = "Conflict alert"

SEVERITY_COLORS = {
    Severity.SAFE: SAFE,
    Severity.CAUTION: CAUTION,
    Severity.DANGER: ERROR,
}

tts_queue = queue.Queue()
_tts_thread: Optional[threading.Thread] = None


def tts_worker():
    import pyttsx3
    engine = pyttsx3.init()
    engine.setProperty("rate", 180)
    engine.setProperty("volume", 1.0)
    while True:
        text = tts_queue.get()
        if text is None:
            break
        engine.say(text)
        engine.runAndWait()
        tts_queue.task_done()


def speak_async(text):
    global _tts_thread
    if _tts_thread is None:
        _tts_thread = threading.Thread(target=tts_worker, daemon=True)
        _tts_thread.start()
    tts_queue.put(text)


def to_screen(p, screen_h):
    return int(round(p[0])), int(round(screen_h - p[1]))


def draw_track(screen, db, transform, selected):
    h = transform.height
    # history first so the current position is drawn on top
    for ll, fade in reversed(db.track_fades):
        color = lerp_rgb(fade, GHOST if db.is_ghost else TRACK, config.BG_COLOR)
        pygame.draw.circle(screen, color, to_screen(transform.window_from_latlong(ll), h), 3)

    x, y = to_screen(db.window_pos, h)
    color = GHOST if db.is_ghost else (SELECTED if db.callsign == selected else TRACK)
    pygame.draw.rect(screen, color, pygame.Rect(x - 4, y - 4, 8, 8), 1)

    if db.vector_end is not None:
        end = to_screen(transform.window_from_latlong(db.vector_end), h)
        pygame.draw.line(screen, color, (x, y), end, 1)


def draw_datablock(screen, font, db, transform, selected):
    h = transform.height
    color = GHOST if db.is_ghost else (SELECTED if db.callsign == selected else WHITE)

    top_left = to_screen((db.bounds.p0[0], db.bounds.p1[1]), h)
    ty = top_left[1]
    for line in db.text.split("\n"):
        surf = font.render(line, True, color)
        screen.blit(surf, (top_left[0], ty))
        ty += config.LINE_H

    if db.leader_end is not None:
        pygame.draw.line(screen, GREY, to_screen(db.window_pos, h),
                         to_screen(db.leader_end, h), 1)


def draw_range_indicators(screen, font, frame: FrameOutput):
    h = screen.get_size()[1]
    for c in frame.warnings + frame.violations:
        a = frame.datablocks.get(c.aircraft[0])
        b = frame.datablocks.get(c.aircraft[1])
        if a is None or b is None:
            continue
        color = RED if c.kind is ConflictKind.VIOLATION else AMBER
        pa, pb = to_screen(a.window_pos, h), to_screen(b.window_pos, h)
        pygame.draw.line(screen, color, pa, pb, 1)
        mid = ((pa[0] + pb[0]) // 2, (pa[1] + pb[1]) // 2)
        text = f"{c.lateral_nm:.1f} nm {int(c.vertical_ft)} ft"
        screen.blit(font.render(text, True, color), (mid[0] + 4, mid[1] - 8))


def draw_mit(screen, font, frame: FrameOutput):
    h = screen.get_size()[1]
    for m in frame.mit:
        a = frame.datablocks.get(m.leading)
        b = frame.datablocks.get(m.trailing)
        if a is None or b is None:
            continue
        color = SEVERITY_COLORS[m.severity]
        pa, pb = to_screen(a.window_pos, h), to_screen(b.window_pos, h)
        pygame.draw.line(screen, color, pa, pb, 1)
        mid = ((pa[0] + pb[0]) // 2, (pa[1] + pb[1]) // 2)
        screen.blit(font.render(m.label(), True, color), (mid[0] + 4, mid[1] + 2))


def draw_range_rings(screen, font, transform):
    cx, cy = int(transform.width / 2), int(transform.height / 2)
    px_per_nm = 1.0 / transform.pixel_distance_nm()
    step_nm = 5
    r_nm = step_nm
    while r_nm <= transform.range_nm:
        pygame.draw.circle(screen, (40, 40, 48), (cx, cy), int(r_nm * px_per_nm), 1)
        label = font.render(f"{r_nm}", True, (70, 70, 80))
        screen.blit(label, (cx + 3, cy - int(r_nm * px_per_nm)))
        r_nm += step_nm


def draw_radar(screen, font, world, selected=None):
    """Scope pane: range rings, tracks, datablocks, conflicts and MIT lines."""
    frame: FrameOutput = world.last_frame
    if frame is None:
        return
    transform = world.transform

    pane = pygame.Rect(0, 0, int(transform.width), int(transform.height))
    screen.fill(config.BG_COLOR, pane)
    draw_range_rings(screen, font, transform)

    for db in frame.datablocks.values():
        draw_track(screen, db, transform, selected)
    for db in frame.datablocks.values():
        draw_datablock(screen, font, db, transform, selected)

    draw_range_indicators(screen, font, frame)
    draw_mit(screen, font, frame)

    if frame.alert_fired:
        speak_async(ALERT_PHRASE)
    if frame.violations:
        label = font.render("CONFLICT ALERT", True, RED)
        screen.blit(label, (12, 10))

import pygame
import textwrap
from scope.models import ConflictKind
from .colors import WHITE, AMBER, RED, CYAN, GREEN


def draw_hud(screen, font, world, selected: str = None):
    """Side HUD panel showing controls, scope toggles, conflicts and MIT."""
    screen_w, screen_h = screen.get_size()
    panel_w = int(screen_w * 0.30)
    panel_x = screen_w - panel_w
    margin_x, margin_y = 12, 10
    line_spacing = 20

    scope = world.scope
    cfg = scope.config
    frame = world.last_frame

    # translucent panel
    hud_surface = pygame.Surface((panel_w, screen_h), pygame.SRCALPHA)
    hud_surface.fill((0, 0, 0, 180))
    y = margin_y

    header_lines = [
        f"t = {world.time_s:6.1f}s{'  (paused)' if world.paused else ''}",
        f"Scope: {scope.name}",
        f"Selected: {selected or 'None'}",
        f"Auto layout: {'ON' if cfg.automatic_layout else 'OFF'}"
        f"   Auto MIT: {'ON' if cfg.auto_mit else 'OFF'}",
        f"Rotation: {cfg.rotation_angle:.0f} deg   Range: {world.transform.range_nm:.0f} nm",
        "",
        "Controls:",
        "[1/2/3]  Load scenario",
        "[SPACE]  Pause / Resume",
        "[R]      Reload scenario",
        "[TAB]    Select aircraft",
        "[L]      Toggle auto layout",
        "[T]      Toggle auto MIT",
        "[Q/E]    Rotate scope",
        "[P]      Point out selected",
        "[C]      Clear datablock offset",
        "[drag]   Move datablock",
        "",
    ]

    for line in header_lines:
        surf = font.render(line, True, WHITE)
        hud_surface.blit(surf, (margin_x, y))
        y += line_spacing

    max_text_width = panel_w - 2 * margin_x
    wrap_chars = max_text_width // 9

    def emit(text, color):
        nonlocal y
        for wline in textwrap.wrap(text, width=wrap_chars):
            if y > screen_h - 2 * line_spacing:
                return
            hud_surface.blit(font.render(wline, True, color), (margin_x, y))
            y += line_spacing

    if frame is not None:
        emit("Conflicts:", WHITE)
        conflicts = frame.violations + frame.warnings
        if not conflicts:
            emit("  none", GREEN)
        for c in conflicts:
            color = RED if c.kind is ConflictKind.VIOLATION else AMBER
            emit(f"  {c.kind.name} {c.aircraft[0]}/{c.aircraft[1]} "
                 f"{c.lateral_nm:.2f} nm {c.vertical_ft:.0f} ft", color)

        y += 4
        emit("Miles in trail:", WHITE)
        for m in frame.mit:
            emit(f"  {m.leading} -> {m.trailing}  {m.label()}  {m.severity.name}", CYAN)

        report = frame.layout
        if report.laid_out:
            state = "settled" if report.settled else f"{report.residual_overlaps} overlap(s)"
            emit(f"Layout: {len(report.laid_out)} blocks, {state}", WHITE)

    # session stats at the bottom
    stats = scope.alerts.summary()
    stats_text = (f"Alerts: {stats.alerts_fired}  "
                  f"max violations: {stats.max_violations}")
    surf = font.render(stats_text, True, WHITE)
    hud_surface.blit(surf, (margin_x, screen_h - 2 * line_spacing))

    # border line separating scope and HUD
    pygame.draw.line(hud_surface, (120, 120, 120), (0, 0), (0, screen_h), 1)
    screen.blit(hud_surface, (panel_x, 0))

import pygame, sys, argparse
import logging
from sim.world import World
from sim.scenarios import AIRPORTS, SCENARIOS
import config
from scope.display import RadarScope, ScopeConfig
from scope.io import load_traffic_csv
from scope.projection import ScopeTransform
from viz.pygame_app import render, font_measure
from viz.hud import draw_hud


def load_scenario(key: str):
    fn = SCENARIOS.get(key, SCENARIOS["1"])
    return fn()


def load_traffic(args):
    if args.input:
        try:
            return load_traffic_csv(args.input)
        except (OSError, RuntimeError, ValueError, KeyError) as e:
            print("Failed to load CSV:", e)
    return load_scenario(args.scenario)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--input", "-i",
        help="CSV file with aircraft to load",
        default=None,
    )
    parser.add_argument(
        "--scenario", "-s",
        help="scenario key (1/2/3) if no input CSV",
        default="1",
    )
    parser.add_argument(
        "--range", type=float, default=config.DEFAULT_RANGE_NM,
        help="scope range in nm (center to edge)",
    )
    parser.add_argument(
        "--log-level", default="INFO",
        help="logging level for the scope engine",
    )
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO),
                        format="%(asctime)s %(name)s %(levelname)s %(message)s")

    pygame.init()
    screen = pygame.display.set_mode((config.SCREEN_W, config.SCREEN_H))
    pygame.display.set_caption("Radar Scope")
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("consolas,menlo,monospace", config.FONT_PX)

    # Scope pane takes the left 70%; the HUD covers the rest
    pane_w = int(config.SCREEN_W * 0.70)
    transform = ScopeTransform(center=AIRPORTS["KJFK"], range_nm=args.range,
                               width=pane_w, height=config.SCREEN_H)
    cfg = ScopeConfig(auto_mit_airports=set(AIRPORTS),
                      airport_locations=dict(AIRPORTS))
    scope = RadarScope("Main", cfg, measure=font_measure(font))

    world = World(load_traffic(args), scope, transform)

    # UI state
    selected_idx = 0
    callsigns = sorted(world.ac.keys())
    selected = callsigns[selected_idx] if callsigns else None
    dragging = None
    drag_last = None

    def reset(ac):
        nonlocal callsigns, selected_idx, selected
        world.reset(ac)
        callsigns = sorted(world.ac.keys())
        selected_idx = 0
        selected = callsigns[selected_idx] if callsigns else None

    running = True
    while running:
        dt = clock.tick(int(1.0 / config.DT)) / 1000.0
        dt *= config.SPEED_MULTIPLIER

        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                running = False
            elif e.type == pygame.KEYDOWN:
                if e.key == pygame.K_ESCAPE:
                    running = False

                elif e.key == pygame.K_SPACE:
                    world.paused = not world.paused

                elif e.key == pygame.K_r:
                    reset(load_traffic(args))

                elif e.key == pygame.K_1:
                    reset(load_scenario("1"))

                elif e.key == pygame.K_2:
                    reset(load_scenario("2"))

                elif e.key == pygame.K_3:
                    reset(load_scenario("3"))

                elif e.key == pygame.K_TAB:
                    callsigns = sorted(world.ac.keys())
                    if not callsigns:
                        selected = None
                    else:
                        selected_idx = (selected_idx + 1) % len(callsigns)
                        selected = callsigns[selected_idx]

                elif e.key == pygame.K_l:
                    cfg.automatic_layout = not cfg.automatic_layout

                elif e.key == pygame.K_t:
                    cfg.auto_mit = not cfg.auto_mit

                elif e.key in (pygame.K_q, pygame.K_e):
                    step = -5.0 if e.key == pygame.K_q else 5.0
                    cfg.rotation_angle = (cfg.rotation_angle + step) % 360.0
                    transform.rotation = cfg.rotation_angle

                elif e.key == pygame.K_p:
                    if selected:
                        world.point_out(selected, "N56")

                elif e.key == pygame.K_c:
                    if selected:
                        scope.clear_manual_offset(selected)

            elif e.type == pygame.MOUSEBUTTONDOWN and e.button == 1:
                if world.last_frame is not None:
                    p = (e.pos[0], config.SCREEN_H - e.pos[1])
                    dragging = scope.datablock_at(p, world.last_frame)
                    drag_last = e.pos
                    if dragging:
                        selected = dragging

            elif e.type == pygame.MOUSEBUTTONUP and e.button == 1:
                dragging = None

            elif e.type == pygame.MOUSEMOTION and dragging:
                # pygame is y-down, the scope window is y-up
                delta = (e.pos[0] - drag_last[0], drag_last[1] - e.pos[1])
                drag_last = e.pos
                scope.drag_datablock(dragging, delta)

        # world step
        world.step(dt)

        # Render scope + HUD
        render(screen, font, world, selected=selected)
        draw_hud(screen, font, world, selected=selected)

        pygame.display.flip()

    world.close()

    stats = scope.alerts.summary()
    print(f"Frames: {stats.frames}  alerts fired: {stats.alerts_fired}  "
          f"frames with violations: {stats.violation_frames}")

    pygame.quit()
    sys.exit(0)


if __name__ == "__main__":
    main()

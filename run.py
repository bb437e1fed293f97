"""
Main entry point for the bubble metaball renderer.

This script:
1. Initializes Taichi and allocates the compositor + shader fields
2. Loads the background (image file or procedural water)
3. Runs main loop: drain light → re-cluster → upload → sdf → gradient → shade → show

Controls:
  - LMB drag: Move the bubble under the cursor
  - LMB double click: Add a bubble / remove the bubble under the cursor
  - RMB vertical drag: Pinch (rescale) the bubble under the cursor
  - T: Tap probe (prints the field value under the cursor)
  - Left/Right arrows: Rotate the light (without --sensor)
  - ESC: Exit
"""

import argparse
import math
import threading
import time

import taichi as ti

from config import (GRID_WIDTH, GRID_HEIGHT, DOUBLE_CLICK_SECONDS, PINCH_DRAG_GAIN,
                    PERF_EVERY, print_config)
from fields import SDFCompositor
from gestures import (GestureRouter, ViewMapping, PHASE_BEGAN, PHASE_CHANGED,
                      PHASE_ENDED)
from lighting import LightFeed, ShadingParams, simulate_sensor
from session import BubbleSet
from shading import RefractionShader, make_background, load_background


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Interactive bubble metaball renderer')
    parser.add_argument('--image', type=str, default=None,
                        help='Background image (default: procedural water)')
    parser.add_argument('--width', type=int, default=GRID_WIDTH,
                        help=f'Grid width without --image (default: {GRID_WIDTH})')
    parser.add_argument('--height', type=int, default=GRID_HEIGHT,
                        help=f'Grid height without --image (default: {GRID_HEIGHT})')
    parser.add_argument('--cpu', action='store_true',
                        help='Run kernels on the CPU backend')
    parser.add_argument('--sensor', action='store_true',
                        help='Rotate the light from a simulated motion sensor thread')
    return parser.parse_args()


def seed_bubbles(bubbles, width, height):
    """Initial scene: two merging bubbles, one chain of three, one loner."""
    bubbles.add((width * 0.30, height * 0.50), 90.0)
    bubbles.add((width * 0.30 + 140.0, height * 0.50), 70.0)

    bubbles.add((width * 0.70, height * 0.25), 60.0)
    bubbles.add((width * 0.70 + 100.0, height * 0.25 + 30.0), 50.0)
    bubbles.add((width * 0.70 + 180.0, height * 0.25 + 70.0), 45.0)

    bubbles.add((width * 0.65, height * 0.75), 80.0)


def main():
    args = parse_args()

    ti.init(arch=ti.cpu if args.cpu else ti.gpu)
    print(f"[Taichi] Initialized with backend: {ti.cfg.arch}")

    if args.image:
        background = load_background(args.image)
        print(f"[Init] Background: {args.image}")
    else:
        background = make_background(args.width, args.height)
        print(f"[Init] Background: procedural water")
    width, height = background.shape[0], background.shape[1]
    print_config()
    print(f"[Init] Grid: {width}×{height} cells")

    compositor = SDFCompositor(width, height)
    shader = RefractionShader(background)
    bubbles = BubbleSet()
    seed_bubbles(bubbles, width, height)
    light = LightFeed()
    sensor_stop = threading.Event()
    sensor = None
    if args.sensor:
        sensor = threading.Thread(target=simulate_sensor, args=(light, sensor_stop),
                                  name="motion-sensor", daemon=True)
        sensor.start()
        print("[Init] Light: simulated motion sensor thread")

    window = ti.ui.Window("Bubbles", (width, height), vsync=True)
    canvas = window.get_canvas()
    router = GestureRouter(bubbles, compositor, ViewMapping((width, height), (width, height)))

    print("\n" + "=" * 70)
    print("BUBBLES - METABALL SDF")
    print("=" * 70)
    print(__doc__.split("Controls:")[1].rstrip())
    print("=" * 70 + "\n")

    def cursor():
        cx, cy = window.get_cursor_pos()
        return cx * width, cy * height

    panning = False
    pinching = False
    pinch_anchor_y = 0.0
    last_click = -1.0
    light_angle = math.atan2(light.current[1], light.current[0])
    frame = 0

    while window.running:
        for e in window.get_events():
            if e.type == ti.ui.PRESS:
                if e.key == ti.ui.ESCAPE:
                    window.running = False
                elif e.key == ti.ui.LMB:
                    now = time.perf_counter()
                    if now - last_click <= DOUBLE_CLICK_SECONDS:
                        router.on_double_tap(cursor())
                        last_click = -1.0
                    else:
                        router.on_pan(PHASE_BEGAN, cursor())
                        panning = True
                        last_click = now
                elif e.key == ti.ui.RMB:
                    router.on_pinch(PHASE_BEGAN, cursor())
                    pinching = True
                    pinch_anchor_y = window.get_cursor_pos()[1]
                elif e.key in ('t', 'T'):
                    router.on_tap(cursor())
                elif e.key in (ti.ui.LEFT, ti.ui.RIGHT) and sensor is None:
                    light_angle += 0.15 if e.key == ti.ui.LEFT else -0.15
                    # Keyboard stands in for the motion sensor thread
                    light.publish(roll=light_angle, yaw=light_angle)
            elif e.type == ti.ui.RELEASE:
                if e.key == ti.ui.LMB and panning:
                    router.on_pan(PHASE_ENDED, cursor())
                    panning = False
                elif e.key == ti.ui.RMB and pinching:
                    router.on_pinch(PHASE_ENDED, cursor())
                    pinching = False

        if panning:
            router.on_pan(PHASE_CHANGED, cursor())
        if pinching:
            dy = window.get_cursor_pos()[1] - pinch_anchor_y
            router.on_pinch(PHASE_CHANGED, cursor(), math.exp(PINCH_DRAG_GAIN * dy))

        t_start = time.perf_counter()
        params = ShadingParams.for_grid(light.drain(), width, height)
        clustering = bubbles.update()
        compositor.upload(clustering)
        t_cluster = time.perf_counter()

        compositor.build_fields()
        image = shader.shade(compositor, params)
        ti.sync()
        t_fields = time.perf_counter()

        canvas.set_image(image)
        window.show()
        t_render = time.perf_counter()

        frame += 1
        if frame % PERF_EVERY == 0:
            dt_cluster = t_cluster - t_start
            dt_fields = t_fields - t_cluster
            dt_render = t_render - t_fields
            dt_total = t_render - t_start
            fps_estimate = 1.0 / dt_total if dt_total > 0 else 0.0
            print(f"[PERF] Frame {frame}: cluster={dt_cluster * 1e3:.2f}ms  fields={dt_fields * 1e3:.2f}ms  "
                  f"render={dt_render * 1e3:.2f}ms  | FPS≈{fps_estimate:.1f}  "
                  f"bubbles={len(bubbles)} groups={len(clustering.groups)}")

    if sensor is not None:
        sensor_stop.set()
        sensor.join()

    print("\n[Exit] Renderer closed.")
    print(f"       Total frames: {frame}")
    print(f"       Live bubbles: {len(bubbles)}")


if __name__ == "__main__":
    main()

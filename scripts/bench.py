#!/usr/bin/env python3
"""
Benchmark script for the bubble renderer - Reproducible Performance Testing
===========================================================================

Runs a fixed number of frames with a deterministic seed and reports:
- FPS (frames per second)
- Time breakdown (cluster, upload, fields, shade)
- Configuration used

Each frame nudges every bubble so the clustering changes like it would
under a drag gesture.

Usage:
    python scripts/bench.py [--frames N] [--bubbles N] [--width W] [--height H]

Example:
    python scripts/bench.py --frames 200 --bubbles 64
"""

import sys
import os
import time
import argparse
import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import taichi as ti

from config import GRID_WIDTH, GRID_HEIGHT, MAX_BUBBLES
from fields import SDFCompositor
from lighting import LightFeed, ShadingParams
from session import BubbleSet
from shading import RefractionShader, make_background


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Benchmark bubble renderer performance')
    parser.add_argument('--frames', type=int, default=100,
                        help='Number of frames to run (default: 100)')
    parser.add_argument('--bubbles', type=int, default=32,
                        help=f'Number of bubbles (default: 32, max {MAX_BUBBLES})')
    parser.add_argument('--width', type=int, default=GRID_WIDTH,
                        help=f'Grid width (default: {GRID_WIDTH})')
    parser.add_argument('--height', type=int, default=GRID_HEIGHT,
                        help=f'Grid height (default: {GRID_HEIGHT})')
    parser.add_argument('--seed', type=int, default=42,
                        help='Random seed for reproducibility (default: 42)')
    parser.add_argument('--cpu', action='store_true',
                        help='Run kernels on the CPU backend')
    return parser.parse_args()


def initialize_scene(n_bubbles, width, height, seed):
    """
    Spawn bubbles with random positions and radii.

    Returns:
        Tuple of (BubbleSet, per-bubble velocity array)
    """
    rng = np.random.default_rng(seed)
    bubbles = BubbleSet()
    for _ in range(n_bubbles):
        origin = (rng.uniform(0.0, width), rng.uniform(0.0, height))
        bubbles.add(origin, rng.uniform(20.0, 80.0))
    velocities = rng.normal(0.0, 2.0, size=(n_bubbles, 2))
    return bubbles, velocities


def drift(bubbles, velocities, width, height):
    """Drag every bubble one step through the selection API, bouncing off the edges."""
    for b, v in zip(list(bubbles), velocities):
        x, y = b.origin[0] + v[0], b.origin[1] + v[1]
        if not 0.0 <= x < width:
            v[0] = -v[0]
            x = min(max(x, 0.0), width - 1.0)
        if not 0.0 <= y < height:
            v[1] = -v[1]
            y = min(max(y, 0.0), height - 1.0)
        bubbles.begin_selection(b, b.origin)
        bubbles.move_selection((x, y))
    bubbles.clear_selection()


def run_benchmark(args):
    """
    Run benchmark and collect performance statistics.

    Args:
        args: Parsed command line arguments

    Returns:
        Dictionary with benchmark results
    """
    print(f"\n{'='*70}")
    print(f"BUBBLE RENDERER BENCHMARK")
    print(f"{'='*70}\n")

    print(f"Configuration:")
    print(f"  Bubbles:       {args.bubbles}")
    print(f"  Frames:        {args.frames}")
    print(f"  Seed:          {args.seed}")
    print(f"  Grid:          {args.width}×{args.height}")
    print(f"\n")

    ti.init(arch=ti.cpu if args.cpu else ti.gpu)

    print("Initializing scene...")
    bubbles, velocities = initialize_scene(args.bubbles, args.width, args.height, args.seed)
    compositor = SDFCompositor(args.width, args.height)
    shader = RefractionShader(make_background(args.width, args.height, args.seed))
    params = ShadingParams.for_grid(LightFeed().drain(), args.width, args.height)

    times_cluster = []
    times_upload = []
    times_fields = []
    times_shade = []
    times_total = []

    # Warm-up (first frames pay for JIT compilation)
    warmup_frames = 5
    for frame in range(warmup_frames):
        compositor.upload(bubbles.update())
        compositor.build_fields()
        shader.shade(compositor, params)
    ti.sync()
    print(f"Warm-up complete ({warmup_frames} frames)\n")

    print(f"Running {args.frames} frames...\n")
    start_time_total = time.perf_counter()
    n_groups = 0

    for frame in range(args.frames):
        t0 = time.perf_counter()
        drift(bubbles, velocities, args.width, args.height)

        # 1. Clustering
        t_cluster_start = time.perf_counter()
        clustering = bubbles.update()
        n_groups = len(clustering.groups)
        t_cluster = time.perf_counter() - t_cluster_start

        # 2. Snapshot upload
        t_upload_start = time.perf_counter()
        compositor.upload(clustering)
        ti.sync()
        t_upload = time.perf_counter() - t_upload_start

        # 3. Scalar + gradient fields
        t_fields_start = time.perf_counter()
        compositor.build_fields()
        ti.sync()
        t_fields = time.perf_counter() - t_fields_start

        # 4. Shading
        t_shade_start = time.perf_counter()
        shader.shade(compositor, params)
        ti.sync()
        t_shade = time.perf_counter() - t_shade_start

        t_frame = time.perf_counter() - t0
        times_cluster.append(t_cluster)
        times_upload.append(t_upload)
        times_fields.append(t_fields)
        times_shade.append(t_shade)
        times_total.append(t_frame)

        if (frame + 1) % 10 == 0 or frame == args.frames - 1:
            fps_current = 1.0 / t_frame if t_frame > 0 else 0
            print(f"  Frame {frame+1:4d}/{args.frames}: {fps_current:6.1f} FPS  groups={n_groups}")

    end_time_total = time.perf_counter()

    total_time = end_time_total - start_time_total
    avg_fps = args.frames / total_time

    avg_cluster = np.mean(times_cluster)
    avg_upload = np.mean(times_upload)
    avg_fields = np.mean(times_fields)
    avg_shade = np.mean(times_shade)
    avg_total = np.mean(times_total)

    total_avg = avg_cluster + avg_upload + avg_fields + avg_shade

    print(f"\n{'='*70}")
    print(f"BENCHMARK RESULTS")
    print(f"{'='*70}\n")

    print(f"Overall Performance:")
    print(f"  Average FPS:   {avg_fps:.2f}")
    print(f"  Total Time:    {total_time:.2f}s")
    print(f"  Avg Frame:     {avg_total*1000:.2f}ms")
    print(f"\n")

    print(f"Time Breakdown (averages):")
    print(f"  Cluster:       {avg_cluster*1000:6.2f}ms  ({100*avg_cluster/total_avg:5.1f}%)")
    print(f"  Upload:        {avg_upload*1000:6.2f}ms  ({100*avg_upload/total_avg:5.1f}%)")
    print(f"  Fields:        {avg_fields*1000:6.2f}ms  ({100*avg_fields/total_avg:5.1f}%)")
    print(f"  Shade:         {avg_shade*1000:6.2f}ms  ({100*avg_shade/total_avg:5.1f}%)")
    print(f"\n")

    return {
        'avg_fps': avg_fps,
        'total_time': total_time,
        'avg_frame_ms': avg_total * 1000,
        'avg_cluster_ms': avg_cluster * 1000,
        'avg_upload_ms': avg_upload * 1000,
        'avg_fields_ms': avg_fields * 1000,
        'avg_shade_ms': avg_shade * 1000,
        'config': {
            'bubbles': args.bubbles,
            'frames': args.frames,
            'seed': args.seed,
            'grid': (args.width, args.height),
        }
    }


def main():
    """Main entry point."""
    args = parse_args()
    run_benchmark(args)

    print(f"Benchmark complete!")
    print(f"{'='*70}\n")

    return 0


if __name__ == '__main__':
    sys.exit(main())

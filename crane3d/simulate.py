# crane3d/simulate.py

"""Run the crane model headless with constant driving forces.

Emulates a host calling ``update_fixed`` once per rendered frame and prints
the final state.

Usage:
    python -m crane3d.simulate                                  # defaults
    python -m crane3d.simulate --model nonlinear-complete --rail 20 --duration 3
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .config import DEFAULT_FIXED_STEP, CraneConfig, ModelType
from .logging_config import setup_logging
from .model import Model
from .state import ModelState

logger = logging.getLogger(__name__)


def run(
    cfg: CraneConfig,
    f_rail: float = 0.0,
    f_cart: float = 0.0,
    f_wind: float = 0.0,
    duration: float = 2.0,
    frame_time: float = 1.0 / 60.0,
    fixed_step: float = DEFAULT_FIXED_STEP,
    print_every: int = 0,
) -> tuple[Model, List[ModelState]]:
    """Simulate *duration* seconds of frames and return the model and the
    state after every frame."""
    cfg.validate()
    model = Model(cfg)
    states: List[ModelState] = []

    num_frames = int(round(duration / frame_time))
    for frame in range(num_frames):
        state = model.update_fixed(fixed_step, frame_time, f_rail, f_cart, f_wind)
        states.append(state)
        if print_every and frame % print_every == 0:
            logger.info(
                "frame %d: rail=%.3f cart=%.3f line=%.3f alfa=%.4f beta=%.4f",
                frame, state.rail_offset, state.cart_offset, state.lift_line,
                state.alfa, state.beta,
            )

    return model, states


# ---- CLI entry point -------------------------------------------------------
def _parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Run the 3D crane model with constant forces")
    parser.add_argument("--model", type=str, default=ModelType.LINEAR.value,
                        choices=[t.value for t in ModelType],
                        help="Crane dynamics to use")
    parser.add_argument("--rail", type=float, default=0.0, help="Rail force Fx (N)")
    parser.add_argument("--cart", type=float, default=0.0, help="Cart force Fy (N)")
    parser.add_argument("--wind", type=float, default=0.0,
                        help="Winding force Fr (N), negative reels the line in")
    parser.add_argument("--duration", type=float, default=2.0, help="Simulated seconds")
    parser.add_argument("--fixed-step", type=float, default=DEFAULT_FIXED_STEP,
                        help="Size of one physics sub-step (s)")
    parser.add_argument("--frame", type=float, default=1.0 / 60.0,
                        help="Emulated host frame time (s)")
    parser.add_argument("--print-every", type=int, default=0,
                        help="Log the state every N frames (0 = only the final state)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    cfg = CraneConfig(model_type=ModelType(args.model))
    try:
        model, _ = run(
            cfg,
            f_rail=args.rail,
            f_cart=args.cart,
            f_wind=args.wind,
            duration=args.duration,
            frame_time=args.frame,
            fixed_step=args.fixed_step,
            print_every=args.print_every,
        )
    except ValueError as exc:
        logger.error("Invalid simulation setup: %s", exc)
        return 2

    print(model.state_debug_text())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

import argparse
import logging
import math

from .config import RunConfig, build_from_config, build_task, load_config
from .metrics.core import MetricTracker
from .telemetry.writer import TelemetryWriter

logger = logging.getLogger(__name__)


def _train(network, task, train, mt, writer=None) -> float:
    cost = float("nan")
    for it in range(train.iterations):
        sequence, expected = task.sample()
        cost = network.train_one_sequence(sequence, expected, train.learning_rate)
        mt.update_cost(cost)
        if writer is not None:
            writer.write({
                "iteration": it,
                "steps": len(sequence),
                "supervised": sum(e is not None for e in expected),
                "cost": cost,
                "cost_ema": mt.ema,
                "finite": math.isfinite(cost),
                "||s||": network.recurrent_layer.metrics()["||s||"],
            })
        if not math.isfinite(cost):
            logger.warning("non-finite cost %r at iteration %d", cost, it)
        if train.log_every > 0 and (it + 1) % train.log_every == 0:
            logger.info("[%d] cost=%.6g ema=%.6g", it + 1, cost, mt.ema)
    return cost


def run_from_config(cfg) -> float:
    """Train on the configured task and return the cost reported by the last call."""
    run = cfg if isinstance(cfg, RunConfig) else RunConfig.from_dict(cfg)
    network = build_from_config(run)
    task = build_task(run)
    train = run.training

    mt = MetricTracker()
    logger.info(
        "training %s for %d iterations (lr=%g, state_size=%d)",
        run.task.get("type"), train.iterations, train.learning_rate, run.network.state_size,
    )
    if run.telemetry.enabled:
        with TelemetryWriter(path=run.telemetry.path, fmt=run.telemetry.fmt) as writer:
            cost = _train(network, task, train, mt, writer)
    else:
        cost = _train(network, task, train, mt)

    logger.info("done: %s", mt.snapshot())
    return cost


def main(argv=None):
    parser = argparse.ArgumentParser(description="Train a recurrent network with backpropagation through time")
    parser.add_argument("--config", type=str, required=True)
    parser.add_argument("--log-level", type=str, default="INFO")
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    cost = run_from_config(load_config(args.config))
    print(f"final cost {cost:.6g}")


if __name__ == "__main__":
    main()

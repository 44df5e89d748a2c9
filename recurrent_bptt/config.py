# MIT License
# Run configuration: plain dataclasses filled from a YAML document.
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional
import inspect
import yaml

from .entrypoints import load, resolve
from .rnn.network import RecurrentNetwork, build_network


def _uniform_spec():
    return {"type": "uniform", "low": 0.0, "high": 0.1}


def _constant_spec(value: float = 0.0):
    return lambda: {"type": "constant", "value": value}


@dataclass
class NetworkConfig:
    input_size: int = 1
    output_size: int = 1
    state_size: int = 1
    visible_size: Optional[int] = None
    recurrent_activation: str = "identity"
    output_activation: str = "identity"
    final_activation: str = "identity"
    cost: str = "mean_squared_error"
    recurrent_weights: Dict[str, Any] = field(default_factory=_uniform_spec)
    recurrent_biases: Dict[str, Any] = field(default_factory=_constant_spec(0.0))
    output_weights: Dict[str, Any] = field(default_factory=_uniform_spec)
    output_biases: Dict[str, Any] = field(default_factory=_constant_spec(0.0))
    final_weights: Dict[str, Any] = field(default_factory=_constant_spec(1.0))

    def __post_init__(self):
        for name in ("input_size", "output_size", "state_size"):
            if int(getattr(self, name)) < 1:
                raise ValueError(f"network.{name} must be >= 1, got {getattr(self, name)}")


@dataclass
class TrainingConfig:
    iterations: int = 1000
    learning_rate: float = 0.05
    log_every: int = 100

    def __post_init__(self):
        if self.iterations < 0:
            raise ValueError(f"training.iterations must be >= 0, got {self.iterations}")
        if not self.learning_rate > 0.0:
            raise ValueError(f"training.learning_rate must be > 0, got {self.learning_rate}")


@dataclass
class TelemetryConfig:
    enabled: bool = True
    path: str = "logs/run.jsonl"
    fmt: str = "jsonl"


@dataclass
class RunConfig:
    seed: int = 0
    task: Dict[str, Any] = field(default_factory=lambda: {"type": "lag_memory", "lag": 1})
    network: NetworkConfig = field(default_factory=NetworkConfig)
    training: TrainingConfig = field(default_factory=TrainingConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)

    @classmethod
    def from_dict(cls, cfg: Optional[dict]) -> "RunConfig":
        cfg = dict(cfg or {})
        known = {f.name for f in fields(cls)}
        unknown = set(cfg) - known
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")
        return cls(
            seed=int(cfg.get("seed", 0)),
            task=dict(cfg.get("task") or {"type": "lag_memory", "lag": 1}),
            network=NetworkConfig(**(cfg.get("network") or {})),
            training=TrainingConfig(**(cfg.get("training") or {})),
            telemetry=TelemetryConfig(**(cfg.get("telemetry") or {})),
        )


def load_config(path: str) -> RunConfig:
    with open(path, "r", encoding="utf8") as f:
        return RunConfig.from_dict(yaml.safe_load(f))


def _seeded(group: str, spec: Dict[str, Any], seed: int):
    spec = dict(spec)
    name = spec.pop("type", None)
    if name is None:
        raise ValueError(f"component spec for {group} is missing a 'type': {spec}")
    factory = resolve(group, name)
    if "seed" in inspect.signature(factory).parameters:
        spec.setdefault("seed", seed)
    return load(group, name, **spec)


def build_from_config(run: RunConfig) -> RecurrentNetwork:
    net = run.network
    acts = "recurrent_bptt.activations"
    inits = "recurrent_bptt.initializers"
    return build_network(
        net.input_size,
        net.output_size,
        net.state_size,
        visible_size=net.visible_size,
        init_recurrent_weights=_seeded(inits, net.recurrent_weights, run.seed),
        init_recurrent_biases=_seeded(inits, net.recurrent_biases, run.seed + 1),
        recurrent_activation=resolve(acts, net.recurrent_activation),
        init_output_weights=_seeded(inits, net.output_weights, run.seed + 2),
        init_output_biases=_seeded(inits, net.output_biases, run.seed + 3),
        output_activation=resolve(acts, net.output_activation),
        init_final_weights=_seeded(inits, net.final_weights, run.seed + 4),
        final_activation=resolve(acts, net.final_activation),
        cost=resolve("recurrent_bptt.costs", net.cost),
    )


def build_task(run: RunConfig):
    return _seeded("recurrent_bptt.tasks", run.task, run.seed + 5)

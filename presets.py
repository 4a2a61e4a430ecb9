from typing import Dict, TypedDict

from config import SimConfig


class ModelParams(TypedDict):
    P: float
    Q: float
    C: float
    alpha: float
    V_I: float
    V_U: float
    Q_star: float
    strict_q_star: bool


PRESETS: Dict[str, ModelParams] = {
    # mostly uninformed buyers, box shrunk to the threshold
    'shrink': {'P': 5.25, 'Q': 60, 'C': 0.010, 'alpha': 0.12, 'V_I': 0.08, 'V_U': 9.0, 'Q_star': 60, 'strict_q_star': True},
    'normal': {'P': 4.0, 'Q': 110, 'C': 0.020, 'alpha': 0.75, 'V_I': 0.08, 'V_U': 8.0, 'Q_star': 60, 'strict_q_star': False},
    # bonus-size box
    'bonus':  {'P': 4.0, 'Q': 140, 'C': 0.020, 'alpha': 0.55, 'V_I': 0.08, 'V_U': 8.0, 'Q_star': 60, 'strict_q_star': False},
}


def preset_names() -> list[str]:
    return list(PRESETS.keys())


def apply_preset(config: SimConfig, name: str) -> SimConfig:
    """Return config with the preset's model parameters; N, seed and scheduling are kept."""
    params = PRESETS[name]
    return config.with_params(
        P=float(params['P']),
        Q=float(params['Q']),
        C=float(params['C']),
        alpha=float(params['alpha']),
        V_I=float(params['V_I']),
        V_U=float(params['V_U']),
        Q_star=float(params['Q_star']),
        strict_q_star=bool(params['strict_q_star']),
    )

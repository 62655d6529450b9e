"""바이옴 진행 Core - 순수 Python, DB 무관"""

from .evaluator import ProgressionGateEvaluator
from .gates import GateRegistry
from .models import BiomeProgress, ProgressionGate

__all__ = [
    "ProgressionGateEvaluator",
    "GateRegistry",
    "BiomeProgress",
    "ProgressionGate",
]

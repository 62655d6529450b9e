"""스캔 상태 머신 Core"""

from .machine import ScanStateMachine
from .models import ScanConfig, ScanSession, ScanState

__all__ = ["ScanConfig", "ScanSession", "ScanState", "ScanStateMachine"]
